"""TeX extension sets: fixed baseline plus allow-listed optional extensions."""
from typing import Iterable
import logging

logger = logging.getLogger(__name__)

# Always active, regardless of configuration
BASE_EXTENSIONS: tuple[str, ...] = (
    "ams",
    "base",
    "color",
    "newcommand",
    "noerrors",
    "noundefined",
)

# Optional extensions users may enable; anything else is dropped
SUPPORTED_EXTENSIONS: tuple[str, ...] = (
    "amscd",
    "bbox",
    "boldsymbol",
    "braket",
    "bussproofs",
    "cancel",
    "cases",
    "centernot",
    "colortbl",
    "empheq",
    "enclose",
    "extpfeil",
    "gensymb",
    "html",
    "mathtools",
    "mhchem",
    "physics",
    "textcomp",
    "textmacros",
    "unicode",
    "upgreek",
    "verb",
)


def resolve_extensions(configured: Iterable[str] | None = None) -> tuple[str, ...]:
    """
    Compute the effective extension set.

    Baseline extensions come first, followed by configured extensions that are
    in the allow-list, in configuration order. Duplicates are removed.

    Args:
        configured: Extension names from configuration (may contain unknown names)

    Returns:
        Ordered, deduplicated tuple of extension names
    """
    result = list(BASE_EXTENSIONS)
    for name in configured or ():
        if name not in SUPPORTED_EXTENSIONS:
            if name not in BASE_EXTENSIONS:
                logger.debug(f"Ignoring unsupported math extension: {name}")
            continue
        if name not in result:
            result.append(name)
    return tuple(result)
