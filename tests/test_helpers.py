import os
from io import BytesIO

import pytest
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import BadRequestException
from app.helpers import upload
from app.helpers.response import build_pagination
from app.helpers.translator import Translator


def make_upload(name, content=b"\x89PNG\r\n\x1a\n"):
    return UploadFile(file=BytesIO(content), filename=name)


def test_saved_file_name_is_slugified():
    url = upload.save_upload_file(make_upload("My Holiday Photo!.PNG"), "tests")

    assert url.startswith("/uploads/tests/my_holiday_photo_")
    assert url.endswith(".png")
    assert os.path.exists(os.path.join(settings.UPLOAD_DIR, url.replace("/uploads/", "", 1)))


def test_oversized_upload_is_rejected():
    with pytest.raises(BadRequestException) as exc:
        upload.save_upload_file(make_upload("big.png", b"x" * 2048), "tests", max_size=1024)

    assert exc.value.key == "file_too_large"


def test_missing_optional_upload_is_none():
    assert upload.save_upload_file(None, "tests") is None


def test_delete_refuses_paths_outside_upload_dir(tmp_path):
    outside = tmp_path / "keep.txt"
    outside.write_text("keep")

    assert upload.delete_file("../" * 12 + str(outside)) is False
    assert outside.exists()


def test_delete_missing_file_returns_false():
    assert upload.delete_file_by_url("/uploads/tests/does-not-exist.png") is False


def test_translator_falls_back_to_english_then_key():
    translator = Translator()

    assert translator.t("login_success", "ckb") != translator.t("login_success", "en")
    assert translator.t("login_success", "de") == translator.t("login_success", "en")
    assert translator.t("no_such_key", "ar") == "no_such_key"


def test_translator_fills_placeholders():
    message = Translator().t("file_too_large", "en", max_size_mb=5)

    assert "5 MB" in message


def test_pagination_rounds_pages_up():
    assert build_pagination(total=21, page=2, limit=10) == {
        "total": 21,
        "total_page": 3,
        "next": True,
        "page": 2,
        "limit": 10,
    }
    assert build_pagination(total=0, page=0, limit=0)["page"] == 1
