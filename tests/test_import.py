"""Integration tests for import endpoints."""

import csv
import io
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from openpyxl import Workbook


def _make_csv(headers: list[str], rows: list[list[str]]) -> bytes:
    """Helper to create CSV bytes."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return output.getvalue().encode("utf-8")


def _make_xlsx(headers: list[str], rows: list[list]) -> bytes:
    """Helper to create XLSX bytes."""
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


MEMBERS_CSV = _make_csv(
    ["Name", "E-mail", "Sex"],
    [
        ["John Doe", "john@example.com", "male"],
        ["Cher", "cher@example.com", "female"],
        ["Jane Smith", "jane@example.com", "female"],
    ],
)

NAME_MAPPING = {"Name": "fullName", "E-mail": "email", "Sex": "gender"}


async def _upload(client: AsyncClient, content: bytes = MEMBERS_CSV, filename: str = "members.csv") -> dict:
    files = {"file": (filename, io.BytesIO(content), "text/csv")}
    response = await client.post("/api/import/upload", files=files)
    assert response.status_code == 200, response.text
    return response.json()


async def _upload_and_map(client: AsyncClient, mapping: dict | None = None) -> str:
    batch_id = (await _upload(client))["batch_id"]
    response = await client.post(
        f"/api/import/{batch_id}/mapping",
        json={"mapping": mapping or NAME_MAPPING},
    )
    assert response.status_code == 200, response.text
    return batch_id


@pytest.mark.asyncio
async def test_list_fields(client: AsyncClient) -> None:
    response = await client.get("/api/import/fields")
    assert response.status_code == 200

    fields = response.json()
    assert fields[0] == {"key": "firstName", "label": "First Name", "kind": "required", "description": ""}
    assert fields[-1]["key"] == "fullName"
    assert fields[-1]["kind"] == "synthetic"


@pytest.mark.asyncio
async def test_download_csv_template(client: AsyncClient) -> None:
    response = await client.get("/api/import/template")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="member_import_sample.csv"' in response.headers["content-disposition"]
    assert response.text.startswith("firstName,lastName,middleName,email")


@pytest.mark.asyncio
async def test_download_xlsx_template(client: AsyncClient) -> None:
    response = await client.get("/api/import/template", params={"format": "xlsx"})
    assert response.status_code == 200
    assert "spreadsheetml" in response.headers["content-type"]
    # XLSX files are zip archives
    assert response.content[:2] == b"PK"


@pytest.mark.asyncio
async def test_upload_csv(client: AsyncClient) -> None:
    data = await _upload(client)

    assert data["row_count"] == 3
    assert data["headers"] == ["Name", "E-mail", "Sex"]
    assert data["mapping"] == {"Name": None, "E-mail": None, "Sex": None}
    assert data["mapped_count"] == 0
    assert data["is_complete"] is False
    assert data["missing_fields"] == ["First Name", "Last Name"]
    assert data["preview_rows"][0]["Name"] == "John Doe"


@pytest.mark.asyncio
async def test_upload_xlsx(client: AsyncClient) -> None:
    xlsx_data = _make_xlsx(["First", "Last", "Phone"], [["Kofi", "Annan", 233201234567]])
    files = {
        "file": (
            "members.xlsx",
            io.BytesIO(xlsx_data),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    }
    response = await client.post("/api/import/upload", files=files)
    assert response.status_code == 200

    data = response.json()
    assert data["row_count"] == 1
    assert data["preview_rows"][0]["Phone"] == "233201234567"


@pytest.mark.asyncio
async def test_upload_invalid_type(client: AsyncClient) -> None:
    files = {"file": ("members.txt", io.BytesIO(b"First,Last"), "text/plain")}
    response = await client.post("/api/import/upload", files=files)
    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["detail"]


@pytest.mark.asyncio
async def test_upload_headers_only(client: AsyncClient) -> None:
    files = {"file": ("members.csv", io.BytesIO(b"First,Last\n"), "text/csv")}
    response = await client.post("/api/import/upload", files=files)
    assert response.status_code == 400
    assert "No data rows" in response.json()["detail"]


@pytest.mark.asyncio
async def test_set_mapping(client: AsyncClient) -> None:
    batch_id = (await _upload(client))["batch_id"]

    response = await client.post(
        f"/api/import/{batch_id}/mapping",
        json={"mapping": NAME_MAPPING},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["mapping"] == NAME_MAPPING
    assert data["mapped_count"] == 3
    assert data["is_complete"] is True
    assert data["missing_fields"] == []


@pytest.mark.asyncio
async def test_set_mapping_invalid_field(client: AsyncClient) -> None:
    batch_id = (await _upload(client))["batch_id"]

    response = await client.post(
        f"/api/import/{batch_id}/mapping",
        json={"mapping": {"Name": "nickname"}},
    )
    assert response.status_code == 400
    assert "nickname" in response.json()["detail"]


@pytest.mark.asyncio
async def test_set_single_column(client: AsyncClient) -> None:
    batch_id = await _upload_and_map(client)

    # Moving email to another column clears it from E-mail
    response = await client.put(f"/api/import/{batch_id}/mapping/Sex", json={"field": "email"})
    assert response.status_code == 200
    mapping = response.json()["mapping"]
    assert mapping["Sex"] == "email"
    assert mapping["E-mail"] is None


@pytest.mark.asyncio
async def test_set_single_column_unknown(client: AsyncClient) -> None:
    batch_id = (await _upload(client))["batch_id"]
    response = await client.put(f"/api/import/{batch_id}/mapping/Phone", json={"field": "phoneNumber"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_preview(client: AsyncClient) -> None:
    batch_id = await _upload_and_map(client)

    response = await client.post(f"/api/import/{batch_id}/preview")
    assert response.status_code == 200

    data = response.json()
    assert data["record_count"] == 2
    assert data["preview_records"][0] == {
        "firstName": "John",
        "lastName": "Doe",
        "email": "john@example.com",
        "gender": "MALE",
    }
    assert [e["message"] for e in data["validation_errors"]] == [
        "Row 3: Missing required field 'Last Name'"
    ]


@pytest.mark.asyncio
async def test_preview_incomplete_mapping(client: AsyncClient) -> None:
    batch_id = await _upload_and_map(client, {"E-mail": "email"})

    response = await client.post(f"/api/import/{batch_id}/preview")
    assert response.status_code == 400
    assert "Required fields not mapped" in response.json()["detail"]


@pytest.mark.asyncio
async def test_process(client: AsyncClient, member_api) -> None:
    batch_id = await _upload_and_map(client)

    response = await client.post(f"/api/import/{batch_id}/process", json={"skip_duplicates": False})
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "completed"
    report = data["report"]
    assert report["total_processed"] == 2
    assert report["success_count"] == 2
    assert report["error_count"] == 0
    assert report["summary"] == "Import completed: 2 successful, 0 failed, 0 skipped"
    assert len(report["validation_errors"]) == 1
    assert [r.email for r in member_api.submitted] == ["john@example.com", "jane@example.com"]

    # Batch summary reflects the report
    response = await client.get(f"/api/import/batches/{batch_id}")
    assert response.status_code == 200
    summary = response.json()
    assert summary["status"] == "completed"
    assert summary["success_count"] == 2


@pytest.mark.asyncio
async def test_process_partial_failure(client: AsyncClient, member_api) -> None:
    member_api.reject = {"Jane"}
    batch_id = await _upload_and_map(client)

    response = await client.post(f"/api/import/{batch_id}/process")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "completed"
    assert data["report"]["success_count"] == 1
    assert data["report"]["error_count"] == 1
    assert data["report"]["errors"][0]["message"] == "Member Jane already exists"


@pytest.mark.asyncio
async def test_process_channel_failure(client: AsyncClient, member_api) -> None:
    member_api.refuse_after = 0
    batch_id = await _upload_and_map(client)

    response = await client.post(f"/api/import/{batch_id}/process")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "failed"
    assert data["report"]["summary"] == "Import failed due to an error."
    assert data["report"]["error_count"] == 2


@pytest.mark.asyncio
async def test_process_twice_rejected(client: AsyncClient) -> None:
    batch_id = await _upload_and_map(client)

    response = await client.post(f"/api/import/{batch_id}/process")
    assert response.status_code == 200

    response = await client.post(f"/api/import/{batch_id}/process")
    assert response.status_code == 400

    # Mapping is frozen once processed
    response = await client.post(f"/api/import/{batch_id}/mapping", json={"mapping": NAME_MAPPING})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_process_unexpected_error_marks_batch_failed(client: AsyncClient) -> None:
    """A run that dies unexpectedly does not leave the batch processing."""
    batch_id = await _upload_and_map(client)

    with patch(
        "memberimport.routers.import_router.run_import",
        AsyncMock(side_effect=RuntimeError("connection lost")),
    ):
        with pytest.raises(RuntimeError, match="connection lost"):
            await client.post(f"/api/import/{batch_id}/process")

    response = await client.get(f"/api/import/batches/{batch_id}")
    assert response.status_code == 200
    assert response.json()["status"] == "failed"


@pytest.mark.asyncio
async def test_process_without_mapping(client: AsyncClient) -> None:
    batch_id = (await _upload(client))["batch_id"]
    response = await client.post(f"/api/import/{batch_id}/process")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_and_delete_batches(client: AsyncClient) -> None:
    first = (await _upload(client))["batch_id"]
    second = (await _upload(client))["batch_id"]

    response = await client.get("/api/import/batches")
    assert response.status_code == 200
    ids = [b["id"] for b in response.json()]
    assert set(ids) == {first, second}

    response = await client.delete(f"/api/import/batches/{first}")
    assert response.status_code == 204

    response = await client.get(f"/api/import/batches/{first}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_batch_invalid_id(client: AsyncClient) -> None:
    response = await client.get("/api/import/batches/not-an-id")
    assert response.status_code == 404

    response = await client.get("/api/import/batches/0123456789abcdef01234567")
    assert response.status_code == 404
