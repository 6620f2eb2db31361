"""
Unit tests for models, JSON-encoded columns and place schema normalisation
"""

import pytest
from sqlalchemy import text

from app.models import Place
from app.models.types import SafeJSON, decode_json
from app.schemas.place import (
    PlaceIn,
    PlaceResponse,
    clean_text,
    parse_contact,
    parse_gallery,
    parse_location
)


class TestSafeJSON:
    """Tests for the SafeJSON column type"""

    def test_round_trip(self):
        column = SafeJSON(default_factory=list, expected=list)
        value = ["a.jpg", "b.jpg"]
        assert column.process_result_value(column.process_bind_param(value, None), None) == value

    def test_non_ascii_is_kept(self):
        column = SafeJSON(default_factory=dict, expected=dict)
        stored = column.process_bind_param({"Line": "https://line.me/ตลาด"}, None)
        assert "ตลาด" in stored

    @pytest.mark.parametrize("raw", [None, "", "   ", "{not json", b"\xff["])
    def test_malformed_text_degrades_to_default(self, raw):
        assert decode_json(raw, list, list) == []
        assert decode_json(raw, dict, dict) == {}
        assert decode_json(raw, lambda: None) is None

    def test_wrong_shape_degrades_to_default(self):
        assert decode_json('{"a": 1}', list, list) == []
        assert decode_json('["a"]', dict, dict) == {}

    def test_none_is_stored_as_null(self):
        assert SafeJSON().process_bind_param(None, None) is None


class TestPlacePersistence:
    """Round trips through the database"""

    @pytest.mark.asyncio
    async def test_gallery_and_contact_round_trip(self, db_session, stations):
        place = Place(
            station_id="N8",
            name="Round Trip Cafe",
            gallery=["a.jpg", "b.jpg"],
            contact={"Website": "https://x"},
        )
        db_session.add(place)
        await db_session.commit()
        place_id = place.id
        db_session.expunge_all()

        stored = await db_session.get(Place, place_id)
        assert stored.gallery == ["a.jpg", "b.jpg"]
        assert stored.contact == {"Website": "https://x"}
        assert stored.location is None

    @pytest.mark.asyncio
    async def test_corrupt_stored_json_is_read_safely(self, client, db_session, stations):
        """Rows written by older clients with broken JSON still list"""
        await db_session.execute(text(
            "INSERT INTO places (station_id, name, gallery, contact, location) "
            "VALUES ('N8', 'Legacy Row', '[\"a.jpg\",', 'not json', '{\"lat\": 13.7}')"
        ))
        await db_session.commit()

        response = await client.get("/api/places/N8")
        assert response.status_code == 200
        place = response.json()["data"][0]
        assert place["gallery"] == []
        assert place["contact"] == {}
        assert place["location"] is None


class TestPlaceSchemaHelpers:
    """Tests for boundary normalisation helpers"""

    @pytest.mark.parametrize("raw", ["", "  ", "undefined", "null", "None"])
    def test_clean_text_artifacts(self, raw):
        assert clean_text(raw) is None

    def test_clean_text_strips(self):
        assert clean_text("  Siam  ") == "Siam"

    def test_parse_location_from_strings(self):
        assert parse_location(None, "13.75", "100.5") == {"lat": 13.75, "lng": 100.5}

    def test_parse_location_from_object(self):
        assert parse_location({"lat": "13.75", "lng": 100.5}) == {"lat": 13.75, "lng": 100.5}
        assert parse_location('{"latitude": 1, "longitude": 2}') == {"lat": 1.0, "lng": 2.0}

    @pytest.mark.parametrize("lat,lng", [
        ("13.75", None),
        ("abc", "100.5"),
        ("nan", "100.5"),
        ("95", "100.5"),
        (True, 100.5),
    ])
    def test_parse_location_incomplete_or_invalid(self, lat, lng):
        assert parse_location(None, lat, lng) is None

    def test_parse_gallery(self):
        assert parse_gallery('["a.jpg", "", "b.jpg"]') == ["a.jpg", "b.jpg"]
        assert parse_gallery("single.jpg") == ["single.jpg"]
        assert parse_gallery("[broken") == []
        assert parse_gallery(None) == []

    def test_parse_contact_variants(self):
        assert parse_contact('{"Facebook": "https://fb"}') == {"Facebook": "https://fb"}
        assert parse_contact([["Line", "https://a"], ["Line", "https://b"]]) == {"Line": "https://b"}
        assert parse_contact([{"platform": "", "url": "https://x"}]) == {}
        assert parse_contact("undefined") == {}


class TestPlaceSchemas:
    """Tests for the place input/output schemas"""

    def test_accepts_both_spellings(self):
        camel = PlaceIn.model_validate({"name": "A", "stationId": "N8", "openingHours": "9-5", "travelInfo": "Exit 2"})
        snake = PlaceIn.model_validate({"name": "A", "station_id": "N8", "opening_hours": "9-5", "travel_info": "Exit 2"})
        assert camel.to_columns() == snake.to_columns()

    def test_to_columns_uses_snake_case(self):
        columns = PlaceIn.model_validate({"name": " A ", "station_id": "N8", "latitude": 1, "longitude": 2}).to_columns()
        assert columns["name"] == "A"
        assert columns["opening_hours"] is None
        assert columns["location"] == {"lat": 1.0, "lng": 2.0}
        assert "latitude" not in columns

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            PlaceIn.model_validate({"name": "   ", "station_id": "N8"})

    def test_response_serialises_camel_case(self):
        place = Place(
            id=1,
            station_id="N8",
            name="A",
            opening_hours="9-5",
            travel_info="Exit 2",
            gallery=[],
            contact={},
        )
        body = PlaceResponse.model_validate(place).model_dump(by_alias=True)
        assert body["openingHours"] == "9-5"
        assert body["travelInfo"] == "Exit 2"
        assert body["location"] is None
