"""
Parser for the comment tags marking solution and stub regions in exercise source files.

An exercise source file contains both the instructor's solution and
the code handed out to students.
Regions are marked with directives inside comments, for example in Java:

    public int answer() {
        // BEGIN SOLUTION
        return 42;
        // END SOLUTION
        // STUB: return 0;
    }

The parser splits a file into a sequence of tagged spans (one per line).
Every span records the exact source bytes it covers (raw)
and the bytes it contributes to generated output (text).
Directive lines have empty text, except for STUB lines,
whose text is the replacement line.

Files are processed as bytes in any ASCII-compatible encoding.
UTF-16 and UTF-32 files are decoded first and re-encoded span by span.
"""

import dataclasses
import enum
import functools
import logging
import re

import errors
import util.encoding


logger = logging.getLogger(__name__)


class SpanKind(enum.Enum):
    plain = enum.auto()
    stub = enum.auto()
    solution = enum.auto()
    solution_file_marker = enum.auto()
    hidden = enum.auto()


@dataclasses.dataclass(frozen=True)
class TaggedSpan:
    kind: SpanKind
    text: bytes
    raw: bytes


@dataclasses.dataclass(frozen=True)
class CommentSyntax:
    """
    A comment syntax in which tags can be written.

    Fields:
    * start: the token opening a comment.
    * end: the token closing a block comment, or None for a line comment.
    """

    start: str
    end: str | None = None


c_syntaxes = (CommentSyntax("//"), CommentSyntax("/*", "*/"))
markup_syntaxes = (CommentSyntax("<!--", "-->"),)
hash_syntaxes = (CommentSyntax("#"),)


def _by_extension():
    groups = [
        (c_syntaxes, ["java", "c", "cpp", "h", "hpp", "js", "css", "rs", "qml", "cs"]),
        (markup_syntaxes, ["xml", "http", "html", "qrc"]),
        (hash_syntaxes, ["properties", "py", "r"]),
    ]
    for syntaxes, extensions in groups:
        for extension in extensions:
            yield (extension, syntaxes)


syntaxes_by_extension = dict(_by_extension())
"""Comment syntaxes recognized for each file extension (lowercase, without dot)."""


def syntaxes_for(extension):
    """
    The comment syntaxes for a file extension (without dot, any case).
    Returns None if tags are not recognized in files with this extension.
    """
    return syntaxes_by_extension.get(extension.lower())


@functools.cache
def directive_pattern(syntax):
    """
    The compiled pattern matching a directive line (without terminator) in the given syntax.
    Compiled once per syntax.
    """
    end = r"\s*" + re.escape(syntax.end) if syntax.end is not None else ""
    return re.compile(
        r"(?P<indent>\s*)"
        + re.escape(syntax.start)
        + r"\s*"
        + r"(?:"
        + r"(?P<keyword>BEGIN\s+SOLUTION|END\s+SOLUTION|BEGIN\s+HIDDEN|END\s+HIDDEN|SOLUTION\s+FILE)\b.*?"
        + r"|STUB:\s*(?P<stub>.*?)"
        + r")"
        + end
        + r"\s*",
        flags=re.ASCII | re.DOTALL,
    )


_line_pattern = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+")


def split_lines(s):
    """Split a string into lines, keeping '\\r\\n', '\\r' and '\\n' terminators."""
    return _line_pattern.findall(s)


_blocks = {
    "SOLUTION": SpanKind.solution,
    "HIDDEN": SpanKind.hidden,
}


class _Lexer:
    """
    Tags the lines of a single file.
    Keeps track of the currently open block, if any.
    Blocks do not nest.
    """

    def __init__(self, syntaxes, path):
        self.patterns = [directive_pattern(syntax) for syntax in syntaxes]
        self.path = path
        self.block = None
        self.block_start = None
        self.seen_directive = False

    def match(self, body):
        for pattern in self.patterns:
            match = pattern.fullmatch(body)
            if match is not None:
                return match
        return None

    def error(self, error_type, line_number, line):
        return error_type(line_number, line, self.path)

    def lex(self, lines):
        """
        Generator function taking decoded lines (with terminators).
        Yields triples (kind, text, raw) of strings.
        """
        for line_number, line in enumerate(lines, start=1):
            body = line.rstrip("\r\n")
            match = self.match(body)
            if match is None:
                yield (self.block or SpanKind.plain, line, line)
                continue

            stub = match.group("stub")
            if stub is not None:
                self.seen_directive = True
                terminator = line[len(body):]
                yield (SpanKind.stub, match.group("indent") + stub + terminator, line)
                continue

            (verb, noun) = match.group("keyword").split()
            if verb == "SOLUTION":
                if self.seen_directive:
                    raise self.error(errors.MisplacedTagError, line_number, line)
                self.seen_directive = True
                yield (SpanKind.solution_file_marker, "", line)
            elif verb == "BEGIN":
                if self.block is not None:
                    raise self.error(errors.UnbalancedTagError, line_number, line)
                self.seen_directive = True
                self.block = _blocks[noun]
                self.block_start = (line_number, line)
                yield (self.block, "", line)
            else:
                if self.block is not _blocks[noun]:
                    raise self.error(errors.UnbalancedTagError, line_number, line)
                yield (self.block, "", line)
                self.block = None
                self.block_start = None

        if self.block is not None:
            raise self.error(errors.UnbalancedTagError, *self.block_start)


def _decoding(data):
    """
    Returns a triple (bom, codec, text) for the given file content.
    ASCII-compatible content is decoded as latin-1, which maps bytes one-to-one to characters.
    """
    wide = util.encoding.wide_encoding(data)
    if wide is not None:
        (bom, codec) = wide
        try:
            return (bom, codec, data[len(bom):].decode(codec, errors="surrogatepass"))
        except UnicodeDecodeError:
            logger.debug(f"content looked like {codec}, but does not decode")
    return (b"", "latin-1", data.decode("latin-1"))


def parse(data, extension, path=None):
    """
    Generator function producing the tagged spans of a file.

    Arguments:
    * data: the content of the file (bytes).
    * extension:
        The file extension (string, without dot).
        Determines the comment syntax.
        If tags are not recognized for this extension,
        the whole content is a single plain span.
    * path:
        The path of the file, if any.
        Only used to give context in error messages.

    Raises UnbalancedTagError or MisplacedTagError on malformed tags.
    Since this is a generator, errors surface during iteration.
    """
    syntaxes = syntaxes_for(extension)
    if syntaxes is None:
        if data:
            yield TaggedSpan(SpanKind.plain, data, data)
        return

    (bom, codec, content) = _decoding(data)

    def encode(s):
        return s.encode(codec, errors="surrogatepass")

    # The byte order mark survives every filter.
    if bom:
        yield TaggedSpan(SpanKind.plain, bom, bom)

    lexer = _Lexer(syntaxes, path)
    for (kind, text, raw) in lexer.lex(split_lines(content)):
        yield TaggedSpan(kind, encode(text), encode(raw))


def extension_of(path):
    """The extension of a path as used for comment syntax lookup (without dot)."""
    return path.suffix[1:]


def parse_file(path):
    """Read a file and return the list of its tagged spans."""
    with errors.file_operation("read", path):
        data = path.read_bytes()
    return list(parse(data, extension_of(path), path=path))


def render(spans, keep=lambda span: True):
    """Concatenate the output text of the spans accepted by 'keep'."""
    return b"".join(span.text for span in spans if keep(span))
