"""Schema tests."""

from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from package_tracker.exceptions import ValidationFailedError
from package_tracker.schemas import (
    DeleteManyResponse,
    PackageFields,
    PackageResponse,
    RecipientFields,
    parse_fields,
)


def test_package_fields_only_keep_supplied_keys() -> None:
    fields = PackageFields.model_validate({"Status": "pending", "Price": 5})
    assert fields.to_fields() == {"status": "pending", "price": 5}


def test_package_fields_accept_legacy_names() -> None:
    fields = PackageFields.model_validate(
        {"Package_weight": 1.25, "Send_Date": "2024-05-01T10:00:00Z"}
    )
    assert fields.package_weight == 1.25
    assert fields.send_date == datetime(2024, 5, 1, 10, tzinfo=UTC)


def test_parse_fields_reports_wire_field() -> None:
    with pytest.raises(ValidationFailedError) as exc_info:
        parse_fields(RecipientFields, {"RecipientContact": "not a number"})
    assert exc_info.value.field == "RecipientContact"

    with pytest.raises(ValidationFailedError):
        parse_fields(RecipientFields, ["not", "an", "object"])


def test_package_response_formats_numbers() -> None:
    package = SimpleNamespace(
        tracking_number=3,
        status="pending",
        send_date=datetime(2024, 5, 1, tzinfo=UTC),
        sender_name="John Smith",
        recipient_id="r-1",
        origin="Boston",
        destination="Chicago",
        description=None,
        package_weight=2.5,
        price=50,
        id_proof_data=None,
        id_proof_content_type=None,
        id_proof_size=None,
    )

    body = PackageResponse.from_package(package).model_dump(by_alias=True)

    assert body["TrackingNumber"] == 3
    assert body["PackageWeight"] == "2.50 kg"
    assert body["Price"] == "$50.00"
    assert body["Recipient"] is None
    assert body["IDProof"] is None


def test_delete_many_response_aliases() -> None:
    body = DeleteManyResponse(
        message="done", deleted_count=1, not_found_numbers=[2]
    ).model_dump(by_alias=True)

    assert body == {
        "success": True,
        "message": "done",
        "deletedCount": 1,
        "notFoundNumbers": [2],
    }
