from services.shapes import Shape, detect_shape, normalize_records, to_feature_collection

FEATURE = {
    "type": "Feature",
    "id": 7,
    "geometry": {"type": "Point", "coordinates": [19.94, 50.06]},
    "properties": {"regNumber": "KR 12345"},
}


class TestDetectShape:
    def test_variants(self):
        assert detect_shape([{"id": 1}]) == Shape.LIST
        assert detect_shape({"type": "FeatureCollection", "features": []}) == Shape.FEATURE_COLLECTION
        assert detect_shape({"cars": []}) == Shape.WRAPPED
        assert detect_shape({"12": {"lat": 1}, "13": {"lat": 2}}) == Shape.OBJECT_MAP
        assert detect_shape([]) == Shape.EMPTY
        assert detect_shape(None) == Shape.EMPTY
        assert detect_shape("oops") == Shape.EMPTY
        assert detect_shape({"message": "error"}) == Shape.EMPTY


class TestNormalizeRecords:
    def test_list_drops_non_dicts(self):
        assert normalize_records([{"id": 1}, "x", None]) == [{"id": 1}]

    def test_feature_collection_is_flattened(self):
        records = normalize_records({"type": "FeatureCollection", "features": [FEATURE]})
        assert records == [
            {"regNumber": "KR 12345", "geometry": FEATURE["geometry"], "id": 7}
        ]

    def test_wrapped_envelopes_unwrap_recursively(self):
        payload = {"status": "ok", "data": {"cars": [{"id": 1}, {"id": 2}]}}
        assert normalize_records(payload) == [{"id": 1}, {"id": 2}]

    def test_object_map_keys_become_ids(self):
        records = normalize_records({"12": {"lat": 1}, "13": {"id": "x", "lat": 2}})
        assert {"id": "12", "lat": 1} in records
        assert {"id": "x", "lat": 2} in records

    def test_features_in_plain_list(self):
        records = normalize_records([FEATURE])
        assert records[0]["regNumber"] == "KR 12345"

    def test_does_not_mutate_input(self):
        payload = {"5": {"lat": 1}}
        normalize_records(payload)
        assert payload == {"5": {"lat": 1}}


class TestFeatureCollection:
    def test_passthrough_and_wrapping(self):
        fc = {"type": "FeatureCollection", "features": [FEATURE]}
        assert to_feature_collection(fc) is fc
        assert to_feature_collection({"data": fc}) is fc
        assert to_feature_collection([FEATURE])["features"] == [FEATURE]
        assert to_feature_collection({"features": [FEATURE]})["type"] == "FeatureCollection"

    def test_unrecognised(self):
        assert to_feature_collection({"message": "nope"}) is None
        assert to_feature_collection(None) is None
