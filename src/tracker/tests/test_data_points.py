from datetime import datetime, timedelta, timezone

import pytest


async def _chart(client, headers) -> int:
    r = await client.post("/api/charts", headers=headers, json={"name": "Sleep", "category": "Health"})
    assert r.status_code == 201, r.text
    return r.json()["id"]


async def _add(client, headers, chart_id, measurement, date="2024-03-01T07:00:00Z", name="night"):
    return await client.post(
        f"/api/charts/{chart_id}/data-points",
        headers=headers,
        json={"measurement": measurement, "date": date, "name": name},
    )


@pytest.mark.anyio
async def test_add_and_list_points(client, user):
    headers, _ = user
    chart_id = await _chart(client, headers)

    r = await _add(client, headers, chart_id, 7.5)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["data_point"]["measurement"] == 7.5
    assert body["data_point"]["chart_id"] == chart_id
    assert body["warning"] is None

    r = await client.get(f"/api/charts/{chart_id}/data-points", headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 1


@pytest.mark.anyio
async def test_naive_date_is_stored_as_utc(client, user):
    headers, _ = user
    chart_id = await _chart(client, headers)

    r = await _add(client, headers, chart_id, 7.0, date="2024-03-01T07:00:00")
    assert r.status_code == 201, r.text

    stored = datetime.fromisoformat(r.json()["data_point"]["date"].replace("Z", "+00:00"))
    assert stored == datetime(2024, 3, 1, 7, tzinfo=timezone.utc)


@pytest.mark.anyio
async def test_future_and_ancient_dates_are_rejected(client, user):
    headers, _ = user
    chart_id = await _chart(client, headers)

    tomorrow = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
    r = await _add(client, headers, chart_id, 7.0, date=tomorrow)
    assert r.status_code == 422, r.text

    r = await _add(client, headers, chart_id, 7.0, date="1850-06-01T00:00:00Z")
    assert r.status_code == 422, r.text


@pytest.mark.anyio
@pytest.mark.parametrize("payload", [
    {"measurement": "lots", "date": "2024-03-01T07:00:00Z", "name": "x"},
    {"measurement": 1.0, "date": "2024-03-01T07:00:00Z", "name": ""},
    {"measurement": 1.0, "date": "not a date", "name": "x"},
    {"date": "2024-03-01T07:00:00Z", "name": "x"},
])
async def test_point_payload_validation(client, user, payload):
    headers, _ = user
    chart_id = await _chart(client, headers)

    r = await client.post(f"/api/charts/{chart_id}/data-points", headers=headers, json=payload)
    assert r.status_code == 422, r.text


@pytest.mark.anyio
async def test_outlier_warning_does_not_block(client, user):
    headers, _ = user
    chart_id = await _chart(client, headers)

    for i, value in enumerate([7.0, 8.0, 7.0, 8.0]):
        r = await _add(client, headers, chart_id, value, date=f"2024-03-0{i + 1}T07:00:00Z")
        assert r.json()["warning"] is None

    r = await _add(client, headers, chart_id, 70.0, date="2024-03-06T07:00:00Z")
    assert r.status_code == 201, r.text
    assert "significantly different" in r.json()["warning"]

    r = await client.get(f"/api/charts/{chart_id}/data-points", headers=headers)
    assert r.json()["count"] == 5


@pytest.mark.anyio
async def test_update_and_delete_point(client, user):
    headers, _ = user
    chart_id = await _chart(client, headers)
    point_id = (await _add(client, headers, chart_id, 6.0)).json()["data_point"]["id"]

    r = await client.put(f"/api/data-points/{point_id}", headers=headers, json={"measurement": 6.5})
    assert r.status_code == 200, r.text
    assert r.json()["measurement"] == 6.5
    assert r.json()["name"] == "night"

    r = await client.put(f"/api/data-points/{point_id}", headers=headers, json={})
    assert r.status_code == 400, r.text

    r = await client.delete(f"/api/data-points/{point_id}", headers=headers)
    assert r.status_code == 200, r.text

    r = await client.delete(f"/api/data-points/{point_id}", headers=headers)
    assert r.status_code == 404, r.text


@pytest.mark.anyio
async def test_points_of_other_users_are_off_limits(client, user, register_user, auth_headers, weight_chart):
    headers, _ = user
    point_id = (await client.get(f"/api/charts/{weight_chart}/data-points", headers=headers)).json()[
        "data_points"
    ][0]["id"]

    other_token, _ = await register_user()
    other = auth_headers(other_token)

    r = await _add(client, other, weight_chart, 1.0)
    assert r.status_code == 403, r.text

    r = await client.put(f"/api/data-points/{point_id}", headers=other, json={"name": "mine now"})
    assert r.status_code == 403, r.text

    r = await client.delete(f"/api/data-points/{point_id}", headers=other)
    assert r.status_code == 403, r.text


@pytest.mark.anyio
async def test_deleting_chart_removes_its_points(client, user, weight_chart, db_session):
    from src.tracker.infra.models import DataPointORM

    headers, _ = user
    r = await client.delete(f"/api/charts/{weight_chart}", headers=headers)
    assert r.status_code == 200, r.text

    left = db_session.query(DataPointORM).filter(DataPointORM.chart_id == weight_chart).count()
    assert left == 0
