import pytest

from swagger_recorder.errors import TypeMismatchError, UnsupportedVersionError
from swagger_recorder.swagger.accumulator import accumulate, fold
from swagger_recorder.swagger.combine import merge_documents
from swagger_recorder.swagger.loader import document_to_dict
from swagger_recorder.swagger.models import Observation, ObservedRequest, ObservedResponse, SwaggerDocument

JSON_HEADERS = {"Content-Type": "application/json"}


def _observation(method: str, path: str, status: int, request_body=None, response_body=None, content_type="application/json"):
    headers = {"Content-Type": content_type}
    return Observation(
        request=ObservedRequest(method=method, url=f"http://example.com{path}", headers=headers, body=request_body),
        response=ObservedResponse(status_code=status, headers=headers, body=response_body),
    )


class TestMergeDocuments:
    def test_merge_with_itself(self):
        document = fold(SwaggerDocument(), [
            _observation("POST", "/users", 201, '{"name": "a"}', '{"id": 1}'),
            _observation("GET", "/users", 200, None, '[{"id": 1, "name": "a"}]'),
        ])
        assert merge_documents(document, document) == document

    def test_disjoint_paths_are_copied(self):
        first = fold(SwaggerDocument(), [_observation("GET", "/a", 200, None, '"a"')])
        second = fold(SwaggerDocument(), [_observation("GET", "/b", 200, None, '"b"')])
        result = merge_documents(first, second)
        assert list(result.paths) == ["/a", "/b"]

    def test_new_method_is_copied(self):
        first = fold(SwaggerDocument(), [_observation("GET", "/users", 200, None, "[]")])
        second = fold(SwaggerDocument(), [_observation("POST", "/users", 201, '{"name": "a"}', None)])
        result = merge_documents(first, second)
        assert set(result.paths["/users"].operations()) == {"get", "post"}

    def test_same_operation_is_unified(self):
        first = fold(SwaggerDocument(), [
            _observation("POST", "/users", 201, '{"name": "a", "age": 1}', '{"id": 1}'),
        ])
        second = fold(SwaggerDocument(), [
            _observation("POST", "/users", 201, '{"name": "b"}', '{"id": 2}', content_type="application/vnd.users+json"),
            _observation("POST", "/users", 400, '{"name": "c"}', '{"error": "taken"}', content_type="application/vnd.users+json"),
        ])
        result = document_to_dict(merge_documents(first, second))
        operation = result["paths"]["/users"]["post"]

        assert operation["consumes"] == ["application/json", "application/vnd.users+json"]
        assert operation["produces"] == ["application/json", "application/vnd.users+json"]
        assert len(operation["parameters"]) == 1
        assert operation["parameters"][0]["schema"]["required"] == ["name"]
        assert set(operation["responses"]) == {"201", "400"}
        assert operation["responses"]["201"]["schema"]["required"] == ["id"]

    def test_null_schema_takes_other_side(self):
        first = fold(SwaggerDocument(), [_observation("GET", "/hello", 200, None, None)])
        second = fold(SwaggerDocument(), [_observation("GET", "/hello", 200, None, '"hi"')])
        result = merge_documents(first, second)
        assert document_to_dict(result)["paths"]["/hello"]["get"]["responses"]["200"]["schema"] == {"type": "string"}

    def test_path_parameters_unioned_by_name(self):
        user_id = "550e8400-e29b-41d4-a716-446655440000"
        first = fold(SwaggerDocument(), [_observation("GET", f"/users/{user_id}", 200, None, "{}")])
        second = fold(SwaggerDocument(), [_observation("GET", f"/users/{user_id}", 200, None, "{}")])
        result = merge_documents(first, second)
        assert [p.name for p in result.paths["/users/{uuid}"].get.parameters] == ["uuid"]

    def test_matches_single_fold_of_both_streams(self):
        stream_a = [_observation("GET", "/hello", 200, None, '{"a": 1, "b": 2}')]
        stream_b = [_observation("GET", "/hello", 200, None, '{"a": 3}')]
        combined = merge_documents(fold(SwaggerDocument(), stream_a), fold(SwaggerDocument(), stream_b))
        sequential = fold(SwaggerDocument(), stream_a + stream_b)
        assert document_to_dict(combined) == document_to_dict(sequential)

    def test_incompatible_schemas(self):
        first = accumulate(SwaggerDocument(), ObservedRequest(method="GET", url="http://example.com/n"), ObservedResponse(status_code=200, headers=JSON_HEADERS, body="1"))
        second = accumulate(SwaggerDocument(), ObservedRequest(method="GET", url="http://example.com/n"), ObservedResponse(status_code=200, headers=JSON_HEADERS, body="1.5"))
        with pytest.raises(TypeMismatchError):
            merge_documents(first, second)

    def test_version_checked(self):
        with pytest.raises(UnsupportedVersionError):
            merge_documents(SwaggerDocument(), SwaggerDocument(swagger="1.2"))
