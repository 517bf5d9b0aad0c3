"""Font catalog — the font system a FontDescriptor is realized against.

A descriptor names a family and face (or a PostScript name directly). The
catalog answers which concrete font that request produces. Like a platform
font system, an unknown family/face is silently substituted, which the font
resolver detects by comparing PostScript names.
"""
import logging
from pathlib import Path
from typing import NamedTuple

from PIL import ImageFont

from models.values import FontDescriptor

logger = logging.getLogger(__name__)

DEFAULT_FACE = "Regular"

# Standard directories where TTF/OTF fonts live on Linux/macOS
FONT_SEARCH_DIRS = [
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".local/share/fonts",
    Path.home() / ".fonts",
]


class RealizedFont(NamedTuple):
    name: str
    family: str
    face: str


def postscript_name(family: str, face: str) -> str:
    """'Avenir Next' + 'Ultra Light' -> 'AvenirNext-UltraLight'."""
    return f"{family.replace(' ', '')}-{face.replace(' ', '')}"


def _faces(family: str, faces: list[str], regular_name: str | None = None) -> dict[str, str]:
    names = {face: postscript_name(family, face) for face in faces}
    if regular_name is not None:
        names[DEFAULT_FACE] = regular_name
    return names


_BUILTIN_FAMILIES: dict[str, dict[str, str]] = {
    "Avenir Next": _faces("Avenir Next", [
        "Regular", "Italic", "Ultra Light", "Ultra Light Italic", "Medium", "Medium Italic",
        "Demi Bold", "Demi Bold Italic", "Bold", "Bold Italic", "Heavy", "Heavy Italic",
    ]),
    "Avenir": _faces("Avenir", [
        "Roman", "Light", "Book", "Medium", "Heavy", "Black", "Oblique",
    ]),
    "Baskerville": _faces("Baskerville", [
        "Regular", "Italic", "Semi Bold", "Semi Bold Italic", "Bold", "Bold Italic",
    ], regular_name="Baskerville"),
    "Helvetica": _faces("Helvetica", [
        "Regular", "Oblique", "Light", "Light Oblique", "Bold", "Bold Oblique",
    ], regular_name="Helvetica"),
    "Helvetica Neue": _faces("Helvetica Neue", [
        "Regular", "Italic", "Light", "Light Italic", "Medium", "Medium Italic",
        "Thin", "Thin Italic", "Bold", "Bold Italic",
    ], regular_name="HelveticaNeue"),
    "Courier": _faces("Courier", [
        "Regular", "Oblique", "Bold", "Bold Oblique",
    ], regular_name="Courier"),
    "Georgia": _faces("Georgia", [
        "Regular", "Italic", "Bold", "Bold Italic",
    ], regular_name="Georgia"),
    "Menlo": _faces("Menlo", ["Regular", "Italic", "Bold", "Bold Italic"]),
    "DejaVu Sans": _faces("DejaVu Sans", [
        "Book", "Oblique", "Bold", "Bold Oblique",
    ], regular_name="DejaVuSans"),
}

_SUBSTITUTE = RealizedFont(name="Helvetica", family="Helvetica", face=DEFAULT_FACE)


class FontCatalog:
    """Known families, each mapping face name -> PostScript name."""

    def __init__(
        self,
        families: dict[str, dict[str, str]] | None = None,
        substitute: RealizedFont = _SUBSTITUTE,
    ):
        self._families: dict[str, dict[str, str]] = {
            family: dict(faces) for family, faces in (families or {}).items()
        }
        self._substitute = substitute

    @classmethod
    def default(cls) -> "FontCatalog":
        return cls(_BUILTIN_FAMILIES)

    @property
    def families(self) -> list[str]:
        return sorted(self._families)

    def add_face(self, family: str, face: str, name: str | None = None) -> None:
        self._families.setdefault(family, {})[face] = name or postscript_name(family, face)

    def expected_name(self, descriptor: FontDescriptor) -> str | None:
        """PostScript name the descriptor asks for, or None if it names no font."""
        if descriptor.name:
            return descriptor.name
        if not descriptor.family:
            return None
        face = descriptor.face or DEFAULT_FACE
        known = self._families.get(descriptor.family, {})
        return known.get(face) or postscript_name(descriptor.family, face)

    def realize(self, descriptor: FontDescriptor) -> RealizedFont:
        """Return the font the descriptor actually produces, substituting unknown requests."""
        if descriptor.name:
            for family, faces in self._families.items():
                for face, name in faces.items():
                    if name == descriptor.name:
                        return RealizedFont(name=name, family=family, face=face)
            return self._substitute
        if descriptor.family in self._families:
            face = descriptor.face or DEFAULT_FACE
            name = self._families[descriptor.family].get(face)
            if name is not None:
                return RealizedFont(name=name, family=descriptor.family, face=face)
        return self._substitute

    # ---------------------------------------------------------------------------
    # Font directory scanning
    # ---------------------------------------------------------------------------

    def scan(self, directories: list[Path]) -> int:
        """Register every TTF/OTF font found below ``directories``.

        Returns the number of font files registered.
        """
        count = 0
        for base in directories:
            if not base.exists():
                continue
            for ext in ("*.ttf", "*.TTF", "*.otf", "*.OTF"):
                for path in base.rglob(ext):
                    try:
                        family, face = ImageFont.truetype(str(path), size=12).getname()
                    except OSError as exc:
                        logger.warning("Could not read font %s: %s", path.name, exc)
                        continue
                    if not family:
                        continue
                    self.add_face(family, face or DEFAULT_FACE)
                    count += 1
        logger.debug("Font scan registered %d font files", count)
        return count
