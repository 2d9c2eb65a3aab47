import json

import pytest

from bot.router import build_router
from models.alert import AlertCondition, Operator
from models.enums import AlertType, Frequency, SubscriptionType
from services.export_service import ExportFormat, ExportType, export_user_data


async def _populate(ctx, store):
    await store.set_user_location(ctx.user_id, "Kyiv, UA", 50.45, 30.52)
    await store.create_alert(ctx.user_id, AlertType.TEMPERATURE, AlertCondition(operator=Operator.GT, value=30))
    await store.create_subscription(ctx.user_id, SubscriptionType.DAILY, Frequency.DAILY, "07:00")


@pytest.mark.asyncio
async def test_format_picker_and_json_document(ctx, store):
    await _populate(ctx, store)
    router = build_router()

    picker = await router.dispatch("export_all", ctx)
    assert picker.button_data()[:3] == ["export_format_all_json", "export_format_all_csv", "export_format_all_txt"]

    reply = await router.dispatch("export_format_all_json", ctx)
    assert reply.document is not None
    assert reply.document.filename.startswith("weather_bot_all_")
    assert reply.document.filename.endswith(".json")

    data = json.loads(reply.document.content.decode("utf-8"))
    assert data["user"]["location_name"] == "Kyiv, UA"
    assert data["weather"]["temperature"] == 21.5
    assert data["alerts"][0]["operator"] == "gt"
    assert data["subscriptions"][0]["time_of_day"] == "07:00"


@pytest.mark.asyncio
async def test_csv_and_txt_exports(ctx, store, weather):
    await _populate(ctx, store)

    csv_doc = await export_user_data(store, weather, ctx.user_id, ExportType.SUBSCRIPTIONS, ExportFormat.CSV)
    body = csv_doc.content.decode("utf-8")
    assert body.splitlines()[0] == "section,field,value"
    assert "subscriptions" in body
    assert "alerts" not in body

    txt_doc = await export_user_data(store, weather, ctx.user_id, ExportType.ALERTS, ExportFormat.TXT)
    assert txt_doc.content.decode("utf-8").startswith("Weather bot export (alerts)")


@pytest.mark.asyncio
async def test_weather_export_without_location_has_no_weather(ctx, store, weather):
    doc = await export_user_data(store, weather, ctx.user_id, ExportType.WEATHER, ExportFormat.JSON)
    assert json.loads(doc.content)["weather"] is None
    assert weather.calls == []


@pytest.mark.asyncio
async def test_unknown_export_format_is_refused(ctx):
    reply = await build_router().dispatch("export_format_all_xml", ctx)
    assert reply.text.startswith("❌")
    assert reply.document is None
