"""TeX input stage: package macros expanded into matplotlib mathtext.

Each recognised extension contributes macro definitions written in terms of
constructs mathtext understands. Macros from extensions that are not enabled
are left untouched, so mathtext rejects them as unknown symbols.
"""
from dataclasses import dataclass
from typing import Callable, Iterable, Union
import logging
import re

logger = logging.getLogger(__name__)

# Upper bound on substitutions per expression (guards recursive macros)
MAX_MACRO_SUBSTITUTIONS = 10000

_CONTROL_SEQUENCE_RE = re.compile(r"\\([A-Za-z]+|.)", re.DOTALL)
_PARAMETER_RE = re.compile(r"#([1-9])")
_DEFINITION_RE = re.compile(
    r"\\(newcommand|renewcommand|def|DeclareMathOperator)(\*?)(?![A-Za-z])"
)


class TexError(ValueError):
    """Raised when TeX source cannot be expanded."""


@dataclass(frozen=True)
class Macro:
    """A macro definition: number of arguments and its replacement."""
    nargs: int
    template: Union[str, Callable[[list[str]], str]]
    optional: bool = False  # accepts (and drops) a leading [...] argument

    def expand(self, args: list[str]) -> str:
        if callable(self.template):
            return self.template(args)

        def param(match: re.Match) -> str:
            index = int(match.group(1))
            if index > len(args):
                raise TexError("Illegal macro parameter reference")
            return args[index - 1]

        return _PARAMETER_RE.sub(param, self.template)


def _unicode_char(args: list[str]) -> str:
    code = args[0].strip()
    try:
        value = int(code[1:], 16) if code[:1] in ("x", "X") else int(code)
        return chr(value)
    except (ValueError, OverflowError):
        raise TexError(f"Invalid unicode number: {code}")


_GREEK = (
    "alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta",
    "iota", "kappa", "lambda", "mu", "nu", "xi", "pi", "rho", "sigma", "tau",
    "upsilon", "phi", "chi", "psi", "omega", "varepsilon", "vartheta",
    "varpi", "varrho", "varsigma", "varphi",
)
_GREEK_UPPER = (
    "Gamma", "Delta", "Theta", "Lambda", "Xi", "Pi", "Sigma", "Upsilon",
    "Phi", "Psi", "Omega",
)


# Macros per extension. Extensions with no mathtext counterpart contribute
# nothing: amscd, bussproofs, cancel, cases, centernot, colortbl, empheq,
# mhchem, noerrors, noundefined, verb.
PACKAGE_MACROS: dict[str, dict[str, Macro]] = {
    "base": {
        "lt": Macro(0, "<"),
        "gt": Macro(0, ">"),
        "le": Macro(0, r"\leq"),
        "ge": Macro(0, r"\geq"),
        "ne": Macro(0, r"\neq"),
    },
    "ams": {
        "iff": Macro(0, r"\Longleftrightarrow"),
        "implies": Macro(0, r"\Longrightarrow"),
        "impliedby": Macro(0, r"\Longleftarrow"),
        "lvert": Macro(0, "|"),
        "rvert": Macro(0, "|"),
        "lVert": Macro(0, r"\|"),
        "rVert": Macro(0, r"\|"),
        "tfrac": Macro(2, r"\frac{#1}{#2}"),
        "nonumber": Macro(0, ""),
        "notag": Macro(0, ""),
        "tag": Macro(1, r"\quad(\mathrm{#1})"),
        "eqref": Macro(1, r"(\mathrm{#1})"),
        "xrightarrow": Macro(1, r"\overset{#1}{\longrightarrow}", optional=True),
        "xleftarrow": Macro(1, r"\overset{#1}{\longleftarrow}", optional=True),
    },
    # Colors are left to the theme
    "color": {
        "color": Macro(1, ""),
        "textcolor": Macro(2, "#2"),
        "colorbox": Macro(2, "#2"),
    },
    "bbox": {
        "bbox": Macro(1, "#1", optional=True),
    },
    "boldsymbol": {
        "boldsymbol": Macro(1, r"\mathbf{#1}"),
    },
    "braket": {
        "bra": Macro(1, r"\langle #1|"),
        "ket": Macro(1, r"|#1\rangle"),
        "braket": Macro(1, r"\langle #1\rangle"),
        "Bra": Macro(1, r"\left\langle #1\right|"),
        "Ket": Macro(1, r"\left|#1\right\rangle"),
    },
    "enclose": {
        "enclose": Macro(2, "#2", optional=True),
    },
    "extpfeil": {
        "xlongequal": Macro(1, r"\overset{#1}{=}", optional=True),
    },
    "gensymb": {
        "degree": Macro(0, r"^{\circ}"),
        "celsius": Macro(0, r"^{\circ}\mathrm{C}"),
        "micro": Macro(0, r"\mu"),
        "ohm": Macro(0, r"\Omega"),
    },
    "html": {
        "href": Macro(2, "#2"),
        "class": Macro(2, "#2"),
        "cssId": Macro(2, "#2"),
        "style": Macro(2, "#2"),
    },
    "mathtools": {
        "coloneqq": Macro(0, ":="),
        "Coloneqq": Macro(0, "::="),
        "eqqcolon": Macro(0, "=:"),
        "mathclap": Macro(1, "#1"),
        "mathllap": Macro(1, "#1"),
        "mathrlap": Macro(1, "#1"),
    },
    "physics": {
        "abs": Macro(1, r"\left|#1\right|"),
        "norm": Macro(1, r"\left\|#1\right\|"),
        "dd": Macro(0, r"\mathrm{d}"),
        "dv": Macro(2, r"\frac{\mathrm{d}#1}{\mathrm{d}#2}"),
        "pdv": Macro(2, r"\frac{\partial #1}{\partial #2}"),
        "grad": Macro(0, r"\nabla"),
        "curl": Macro(0, r"\nabla\times"),
        "vb": Macro(1, r"\mathbf{#1}"),
        "vu": Macro(1, r"\hat{\mathbf{#1}}"),
        "order": Macro(1, r"\mathcal{O}\left(#1\right)"),
        "expval": Macro(1, r"\left\langle #1\right\rangle"),
        "comm": Macro(2, r"\left[#1,#2\right]"),
        "Tr": Macro(0, r"\mathrm{Tr}"),
        "tr": Macro(0, r"\mathrm{tr}"),
        "bra": Macro(1, r"\langle #1|"),
        "ket": Macro(1, r"|#1\rangle"),
    },
    "textcomp": {
        "textdegree": Macro(0, r"^{\circ}"),
        "textmu": Macro(0, r"\mu"),
        "texttimes": Macro(0, r"\times"),
        "textdiv": Macro(0, r"\div"),
        "textpm": Macro(0, r"\pm"),
        "textohm": Macro(0, r"\Omega"),
    },
    "textmacros": {
        "textrm": Macro(1, r"\mathrm{#1}"),
        "textbf": Macro(1, r"\mathbf{#1}"),
        "textit": Macro(1, r"\mathit{#1}"),
        "texttt": Macro(1, r"\mathtt{#1}"),
    },
    "unicode": {
        "unicode": Macro(1, _unicode_char, optional=True),
    },
    "upgreek": {
        **{f"up{name}": Macro(0, f"\\{name}") for name in _GREEK},
        **{f"Up{name[0].lower()}{name[1:]}": Macro(0, f"\\{name}") for name in _GREEK_UPPER},
    },
}


class TexInput:
    """
    TeX input restricted to a set of packages.

    Only macros contributed by the enabled packages are expanded. In-source
    definitions are honoured when "newcommand" is enabled (\\newcommand,
    \\renewcommand, \\def) and "ams" is enabled (\\DeclareMathOperator).
    """

    def __init__(self, packages: Iterable[str]):
        self.packages = tuple(packages)
        self.macros: dict[str, Macro] = {}
        for package in self.packages:
            self.macros.update(PACKAGE_MACROS.get(package, {}))

        self._definers = set()
        if "newcommand" in self.packages:
            self._definers.update(("newcommand", "renewcommand", "def"))
        if "ams" in self.packages:
            self._definers.add("DeclareMathOperator")

    def expand(self, tex: str) -> str:
        """
        Expand package and user macros.

        Raises:
            TexError: On missing braces/arguments or runaway macro recursion
        """
        macros = self.macros
        if self._definers:
            tex, user_macros = self._extract_definitions(tex)
            if user_macros:
                macros = {**macros, **user_macros}

        substitutions = 0
        pos = 0
        while match := _CONTROL_SEQUENCE_RE.search(tex, pos):
            macro = macros.get(match.group(1))
            if macro is None:
                pos = match.end()
                continue

            end = match.end()
            if macro.optional:
                end = _skip_optional(tex, end)
            args = []
            for _ in range(macro.nargs):
                arg, end = _read_argument(tex, end, match.group(1))
                args.append(arg)

            tex = tex[:match.start()] + macro.expand(args) + tex[end:]
            # Rescan the replacement so nested macros expand too
            pos = match.start()

            substitutions += 1
            if substitutions > MAX_MACRO_SUBSTITUTIONS:
                raise TexError(
                    "Maximum macro substitution count exceeded; "
                    "is there a recursive use of a macro?"
                )

        return tex

    def _extract_definitions(self, tex: str) -> tuple[str, dict[str, Macro]]:
        """Strip in-source macro definitions, returning them as macros."""
        user_macros: dict[str, Macro] = {}
        pos = 0
        while match := _DEFINITION_RE.search(tex, pos):
            definer = match.group(1)
            if definer not in self._definers:
                pos = match.end()
                continue

            name, end = _read_argument(tex, match.end(), definer)
            name = name.strip()
            if not re.fullmatch(r"\\[A-Za-z]+", name):
                raise TexError(f"First argument to \\{definer} must be a control sequence")

            nargs = 0
            if definer != "def":
                count = re.match(r"\s*\[\s*(\d)\s*\]", tex[end:])
                if count:
                    nargs = int(count.group(1))
                    end += count.end()

            body, end = _read_argument(tex, end, definer)
            if definer == "DeclareMathOperator":
                body = f"\\mathrm{{{body}}}"

            user_macros[name[1:]] = Macro(nargs, body)
            tex = tex[:match.start()] + tex[end:]
            pos = match.start()

        if user_macros:
            logger.debug(f"User macros defined: {', '.join(sorted(user_macros))}")
        return tex, user_macros


def _skip_whitespace(tex: str, pos: int) -> int:
    while pos < len(tex) and tex[pos].isspace():
        pos += 1
    return pos


def _skip_optional(tex: str, pos: int) -> int:
    """Skip an optional [...] argument if one starts at pos."""
    start = _skip_whitespace(tex, pos)
    if start < len(tex) and tex[start] == "[":
        close = tex.find("]", start)
        if close == -1:
            raise TexError("Missing close bracket for optional argument")
        return close + 1
    return pos


def _read_argument(tex: str, pos: int, name: str) -> tuple[str, int]:
    """
    Read one macro argument starting at pos.

    An argument is a brace group (returned without braces), a control
    sequence, or a single character.

    Returns:
        Tuple of (argument text, position after the argument)
    """
    pos = _skip_whitespace(tex, pos)
    if pos >= len(tex) or tex[pos] == "}":
        raise TexError(f"Missing argument for \\{name}")

    if tex[pos] == "\\":
        match = _CONTROL_SEQUENCE_RE.match(tex, pos)
        if match is None:
            raise TexError(f"Missing argument for \\{name}")
        return match.group(0), match.end()

    if tex[pos] != "{":
        return tex[pos], pos + 1

    depth = 0
    i = pos
    while i < len(tex):
        char = tex[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return tex[pos + 1:i], i + 1
        i += 1

    raise TexError("Missing close brace")
