import asyncio
import re

import pytest

from botsuite.schemas.bot import StagedFile
from botsuite.services.upload_service import ObjectUploader, stage_upload, staged_filename

from conftest import FakeS3Client


def run(coro):
    return asyncio.run(coro)


def staged(tmp_path, name="report.pdf", content_type="application/pdf"):
    path = tmp_path / "1700000000000-abcdefabcdef.pdf"
    path.write_bytes(b"%PDF-1.4 body")
    return StagedFile(path=str(path), filename=name, content_type=content_type, size=13)


def test_staged_filename_is_random_with_extension():
    name = staged_filename("Quarterly Report.XLSX")
    assert re.fullmatch(r"\d{13}-[0-9a-f]{12}\.XLSX", name)
    assert staged_filename("a.txt") != staged_filename("a.txt")


def test_stage_upload_without_file():
    async def call():
        async with stage_upload(None, "unused", 10) as result:
            return result

    assert run(call()) is None


def test_disabled_uploader_returns_none(tmp_path):
    uploader = ObjectUploader(endpoint="https://r2.test", bucket="b")
    assert uploader.enabled is False
    assert run(uploader.upload(staged(tmp_path))) is None


def test_upload_with_public_url(tmp_path):
    fake = FakeS3Client()
    uploader = ObjectUploader(
        endpoint="https://r2.test",
        access_key_id="id",
        secret_access_key="secret",
        bucket="files",
        public_url="https://cdn.test/",
        client=fake,
    )

    url = run(uploader.upload(staged(tmp_path)))

    [put] = fake.objects
    assert put["Bucket"] == "files"
    assert put["ContentType"] == "application/pdf"
    assert put["Body"] == b"%PDF-1.4 body"
    assert re.fullmatch(r"uploads/\d{13}-[0-9a-f]{16}-report\.pdf", put["Key"])
    assert url == f"https://cdn.test/{put['Key']}"


def test_upload_without_public_url_returns_none(tmp_path):
    fake = FakeS3Client()
    uploader = ObjectUploader("https://r2.test", "id", "secret", "files", client=fake)

    assert run(uploader.upload(staged(tmp_path))) is None
    assert len(fake.objects) == 1


@pytest.mark.parametrize("name,expected", [
    ("sheet.csv", "text/csv"),
    ("mystery.zzz", "application/octet-stream"),
])
def test_content_type_fallback(tmp_path, name, expected):
    fake = FakeS3Client()
    uploader = ObjectUploader("https://r2.test", "id", "secret", "files", client=fake)

    run(uploader.upload(staged(tmp_path, name=name, content_type=None)))

    assert fake.objects[0]["ContentType"] == expected


def test_store_errors_propagate(tmp_path):
    class BrokenClient:
        def put_object(self, **kwargs):
            raise ConnectionError("store unreachable")

    uploader = ObjectUploader("https://r2.test", "id", "secret", "files", client=BrokenClient())
    with pytest.raises(ConnectionError):
        run(uploader.upload(staged(tmp_path)))
