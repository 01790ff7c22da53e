"""Keyword-driven control language for the loop search."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import IO, Iterable, List, Optional, Sequence, Tuple

from cadb.config import COMMENT_MARKER, SEARCH_PROMPT
from cadb.errors import CommandError, DatabaseError, SearchError
from cadb.model.state import Constraint
from cadb.services.database import DatabaseReader, open_database
from cadb.services.search import SearchEngine

logger = logging.getLogger(__name__)

STRING = "string"
NUMBER = "number"


@dataclass(frozen=True)
class Keyword:
    """A control keyword and the parameters it takes.

    Attributes
    ----------
    name
        Upper-case keyword.
    kind
        ``"string"`` or ``"number"`` parameters.
    nparams
        Number of parameters.
    usage
        One-line help text.
    """

    name: str
    kind: str
    nparams: int
    usage: str


KEYWORDS: Tuple[Keyword, ...] = (
    Keyword("DATABASE", STRING, 1, "DATABASE dbname     Specify the database written by makecadb"),
    Keyword("LENGTH", NUMBER, 1, "LENGTH length       Specify loop length"),
    Keyword("DP", NUMBER, 3, "DP n min max        Distance constraint from Nter of loop"),
    Keyword("DM", NUMBER, 3, "DM n min max        Distance constraint from Cter of loop"),
    Keyword("END", NUMBER, 0, "END                 Run the search"),
    Keyword("QUIT", NUMBER, 0, "QUIT                Exit without running the search"),
    Keyword("HELP", NUMBER, 0, "HELP                Show this list"),
)


def match_keyword(word: str, keywords: Sequence[Keyword] = KEYWORDS) -> Keyword:
    """Resolve a possibly abbreviated, case-insensitive keyword.

    Raises
    ------
    CommandError
        If nothing matches or the abbreviation is ambiguous.
    """

    upper = word.upper()
    for keyword in keywords:
        if keyword.name == upper:
            return keyword
    matches = [keyword for keyword in keywords if keyword.name.startswith(upper)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise CommandError("ambiguous_command", "Ambiguous command", word)
    raise CommandError("unknown_command", "Unknown command", word)


def parse_command(line: str) -> Tuple[Keyword, List[object]]:
    """Split a control line into its keyword and typed parameters.

    String keywords take the rest of the line as a single parameter;
    number keywords take whitespace-separated reals.

    Parameters
    ----------
    line
        Control line with comments already removed.

    Returns
    -------
    tuple
        The matched keyword and its parameters.

    Raises
    ------
    CommandError
        ``unknown_command``/``ambiguous_command`` for a bad keyword,
        ``bad_parameters`` for a wrong parameter count or value.
    """

    parts = line.split(None, 1)
    keyword = match_keyword(parts[0])
    rest = parts[1].strip() if len(parts) > 1 else ""
    if keyword.kind == STRING:
        if keyword.nparams and not rest:
            raise CommandError("bad_parameters", "Missing parameter", line)
        return keyword, [rest] if rest else []
    tokens = rest.split()
    if len(tokens) != keyword.nparams:
        raise CommandError(
            "bad_parameters",
            f"{keyword.name} takes {keyword.nparams} parameter(s)",
            line,
        )
    try:
        values: List[object] = [float(token) for token in tokens]
    except ValueError as exc:
        raise CommandError("bad_parameters", "Parameters must be numbers", line) from exc
    return keyword, values


def _as_positive_int(value: float, what: str) -> int:
    if not float(value).is_integer() or value < 1:
        raise CommandError("bad_parameters", f"{what} must be a positive integer", value)
    return int(value)


@dataclass
class SearchSession:
    """State accumulated by the control commands of one invocation.

    Attributes
    ----------
    database
        Open database reader, once DATABASE has succeeded.
    loop_length
        Loop length; 0 until LENGTH is given.
    positive
        DP constraints in the order given.
    negative
        DM constraints in the order given.
    """

    database: Optional[DatabaseReader] = None
    loop_length: int = 0
    positive: List[Constraint] = field(default_factory=list)
    negative: List[Constraint] = field(default_factory=list)

    def close(self) -> None:
        if self.database is not None:
            self.database.close()
            self.database = None


class CommandInterpreter:
    """Runs control commands against a SearchSession.

    Operator messages and the prompt go to ``err``; candidate
    identifiers go to ``out``.
    """

    def __init__(self, session: SearchSession, out: IO[str], err: IO[str]) -> None:
        self.session = session
        self._out = out
        self._err = err

    def _report(self, message: str) -> None:
        self._err.write(message + "\n")
        self._err.flush()

    def run(self, lines: Iterable[str], interactive: bool = False) -> bool:
        """Process control lines until END, QUIT or end of input.

        Parameters
        ----------
        lines
            Control lines, for example an open file.
        interactive
            Write a prompt before each command.

        Returns
        -------
        bool
            False when a search was started but aborted, True otherwise.
        """

        if interactive:
            self._err.write(SEARCH_PROMPT)
            self._err.flush()
        for raw in lines:
            result = self.execute(raw)
            if result is not None:
                return result
            if interactive:
                self._err.write(SEARCH_PROMPT)
                self._err.flush()
        return True

    def execute(self, raw: str) -> Optional[bool]:
        """Execute one control line.

        Returns
        -------
        bool or None
            None to keep reading; otherwise the session result.
        """

        line = raw.strip()
        if not line or line.startswith(COMMENT_MARKER):
            return None
        try:
            keyword, params = parse_command(line)
        except CommandError as exc:
            if exc.code == "bad_parameters":
                self._report(f"Error in parameters: {line}")
            else:
                self._report(f"Error in command: {line}")
            logger.debug("Rejected command %r: %s", line, exc)
            return None
        handler = getattr(self, f"_cmd_{keyword.name.lower()}")
        try:
            return handler(params)
        except CommandError as exc:
            self._report(f"Error in parameters: {line}")
            logger.debug("Rejected command %r: %s", line, exc)
            return None

    def _cmd_database(self, params: List[object]) -> Optional[bool]:
        if self.session.database is not None:
            self._report("Database already open, command ignored")
            return None
        path = str(params[0])
        try:
            self.session.database = open_database(path)
        except DatabaseError as exc:
            logger.warning("Cannot open database %s: %s", path, exc)
            self._report(f"Can't open database: {path}")
        return None

    def _cmd_length(self, params: List[object]) -> Optional[bool]:
        self.session.loop_length = _as_positive_int(params[0], "Loop length")
        return None

    def _constraint(self, params: List[object]) -> Constraint:
        column = _as_positive_int(params[0], "Constraint column")
        return Constraint(column=column, minimum=float(params[1]), maximum=float(params[2]))

    def _cmd_dp(self, params: List[object]) -> Optional[bool]:
        self.session.positive.append(self._constraint(params))
        return None

    def _cmd_dm(self, params: List[object]) -> Optional[bool]:
        self.session.negative.append(self._constraint(params))
        return None

    def _cmd_help(self, params: List[object]) -> Optional[bool]:
        for keyword in KEYWORDS:
            self._report(keyword.usage)
        return None

    def _cmd_quit(self, params: List[object]) -> Optional[bool]:
        return True

    def _cmd_end(self, params: List[object]) -> Optional[bool]:
        session = self.session
        if session.loop_length == 0:
            self._report("You must specify a loop length first!")
            return None
        if session.database is None:
            self._report("Database must be opened first!")
            return None
        try:
            engine = SearchEngine(
                session.loop_length,
                session.database.ndist,
                positive=session.positive,
                negative=session.negative,
            )
        except SearchError as exc:
            self._report(str(exc))
            return None
        return run_search(engine, session.database, self._out, self._err)


def run_search(
    engine: SearchEngine, database: DatabaseReader, out: IO[str], err: IO[str]
) -> bool:
    """Stream a database through ``engine`` and print the survivors.

    Nothing is printed when the search aborts.

    Parameters
    ----------
    engine
        Configured search engine.
    database
        Reader positioned at the first record.
    out
        Stream receiving one candidate identifier per line.
    err
        Stream receiving failure messages.

    Returns
    -------
    bool
        True when the search ran to completion.
    """

    try:
        candidates = engine.run(database)
    except MemoryError:
        logger.exception("Out of memory during search")
        err.write("No memory to run the search\n")
        return False
    except (OSError, SearchError) as exc:
        logger.exception("Search aborted")
        err.write(f"Search aborted: {exc}\n")
        return False
    if database.skipped:
        logger.warning("Skipped %d malformed database lines", database.skipped)
    for identifier in candidates.enumerate_all():
        out.write(identifier + "\n")
    out.flush()
    return True
