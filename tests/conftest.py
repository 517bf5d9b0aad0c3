import json
import shutil
from pathlib import Path

import pytest
from PIL import Image

from models.document import Document
from settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
APPEARANCE_JSON = FIXTURES_DIR / "appearance.json"


def build_document(storage: Path | None = None, version: int = 1, **sections) -> Document:
    """Decode a document assembled from per-kind dicts, e.g. colors={"red": "rgb/255/0/0"}.

    Keyword names are the JSON section names (metrics, colors, fonts,
    textAttributes, placements, images, buttonStyles, otherParameters, groups).
    """
    document = Document.from_bytes(json.dumps({"version": version, **sections}))
    if storage is not None:
        document.set_storage(storage)
    return document


@pytest.fixture
def appearance_json() -> Path:
    """Path to the complete sample brand document."""
    return APPEARANCE_JSON


@pytest.fixture
def brand_dir(tmp_path: Path) -> Path:
    """A brand folder holding a copy of the sample document and test images.

    Layout:
        appearance.json    the sample document
        logo.png           64x32 opaque PNG
        empty.png          zero-byte file
        notes.txt          text that is not an image
    """
    shutil.copy(APPEARANCE_JSON, tmp_path / "appearance.json")
    Image.new("RGB", (64, 32), (173, 82, 76)).save(tmp_path / "logo.png")
    (tmp_path / "empty.png").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("not an image", encoding="utf-8")
    return tmp_path


@pytest.fixture
def tmp_settings(brand_dir: Path) -> Settings:
    """Settings pointing at the temporary brand folder."""
    return Settings(brand_dir=brand_dir)
