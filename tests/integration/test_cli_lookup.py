import json

import pytest

from parcel_status import cli


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in ("PARCEL_API_BASE_URL", "PARCEL_DATA_FILE", "PARCEL_HTTP_TIMEOUT", "LOG_LEVEL"):
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def _json_report(capsys, *args):
    code = cli.main([*args, "--json", "--no-console"])
    assert code == 0
    return json.loads(capsys.readouterr().out)


@pytest.mark.parametrize(
    "order_no,zip_code,now,code,next_action",
    [
        ("0000RTAB1", "60156", "2023-01-08T12:00:00Z", "delivered", "No action required"),
        ("0000RTAB2", "37902", "2023-01-22T10:00:00Z", "scheduled",
         "Expected delivery Jan 25, 2023, 6:00 AM"),
        ("0000RTAB3", "80796", "2023-01-07T20:30:00Z", "ready_for_collection",
         "Please collect your package"),
        ("0000RTAB4", "20095", "2023-01-10T12:00:00Z", "delayed", "Delivery delayed"),
    ],
)
def test_bundled_orders_resolve(capsys, order_no, zip_code, now, code, next_action):
    report = _json_report(capsys, order_no, "--zip", zip_code, "--now", now)
    assert report["status"]["code"] == code
    assert report["explanation"]["next_action"] == next_action
    assert report["has_zip"] is True


def test_delivered_order_full_report(capsys):
    report = _json_report(capsys, "0000RTAB1", "--zip", "60156", "--now", "2023-01-08T12:00:00Z")

    assert report["explanation"]["explanation"] == "Your package was delivered today at 04:00 AM."
    assert len(report["timelines"]) == 2
    assert report["parcels"][1]["total_value"] == "$19.99"
    assert report["header"]["email"] == "ollie.wright@example.com"


def test_data_file_and_known_orders_round_trip(tmp_path, capsys):
    shipment = {
        "_id": "10",
        "courier": "gls",
        "tracking_number": "GLS123",
        "zip_code": "10115",
        "checkpoints": [
            {
                "status": "Out for delivery",
                "status_details": "The parcel left the depot",
                "event_timestamp": "2023-03-01T07:00:00Z",
                "city": "Berlin",
            }
        ],
        "delivery_info": {
            "orderNo": "B-42",
            "timezone": "Europe/Berlin",
            "announced_delivery_date": "2023-03-01",
            "recipient": "Mia Braun",
            "articles": [{"articleNo": "X1", "articleName": "Kettle", "quantity": 1, "price": 30}],
        },
    }
    data = tmp_path / "orders.json"
    data.write_text(json.dumps([shipment]), encoding="utf-8")

    # the ZIP-less answer is redacted; a previously saved full record fills it back in
    known = tmp_path / "known.json"
    known.write_text(json.dumps([shipment]), encoding="utf-8")

    report = _json_report(
        capsys, "B-42", "--data-file", str(data), "--known-orders", str(known),
        "--now", "2023-03-01T09:00:00Z",
    )

    assert report["status"]["code"] == "out_for_delivery"
    assert report["explanation"]["explanation"] == (
        "Your parcel departed from Berlin at 08:00 AM and is out for delivery. "
        "Expected delivery today."
    )
    assert report["has_zip"] is False
    assert report["estimate"]["is_today"] is True
    assert report["estimate"]["heading"] == "Expected Delivery"


def test_text_output_without_zip(capsys):
    code = cli.main(["0000RTAB3", "--now", "2023-01-07T20:30:00Z", "--no-console"])
    out = capsys.readouterr().out

    assert code == 0
    assert "[Ready for collection] Please collect your package" in out
    assert "Enter the ZIP code of the delivery address to see package contents." in out
    assert "Recipient:" not in out
