import httpx
from fastapi.testclient import TestClient

from mealman.app.core.errors import FetchError, InferenceError, UnsupportedMediaError
from mealman.app.schemas.recipe import DetectionResult, Recipe
from mealman.app.services.media import MediaType
from mealman.app.services.recipe_pipeline import DetectOutcome, ExtractOutcome, RecipePipeline


class FakePipeline:
    def __init__(self, error=None):
        self.error = error
        self.urls = []

    async def detect(self, url):
        self.urls.append(url)
        if self.error:
            raise self.error
        return DetectOutcome(
            url=url,
            media_type=MediaType.YOUTUBE,
            detection=DetectionResult(has_recipe=True, confidence=0.9, recipe_type="bread"),
        )

    async def extract(self, url):
        self.urls.append(url)
        if self.error:
            raise self.error
        recipe = Recipe(title="Bread", ingredients=["flour"]).with_origin(url, "youtube")
        return ExtractOutcome(url=url, media_type=MediaType.YOUTUBE, recipe=recipe)


def test_detect_returns_detection_fields(client, pipeline_override):
    holder, _ = pipeline_override
    holder["pipeline"] = FakePipeline()

    resp = client.post("/api/detect", json={"url": " https://youtu.be/abc "})

    assert resp.status_code == 200
    assert resp.json() == {
        "url": "https://youtu.be/abc",
        "mediaType": "youtube",
        "hasRecipe": True,
        "confidence": 0.9,
        "recipeType": "bread",
    }


def test_extract_returns_wire_recipe(client, pipeline_override):
    holder, _ = pipeline_override
    holder["pipeline"] = FakePipeline()

    resp = client.post("/api/extract", json={"url": "https://youtu.be/abc"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["mediaType"] == "youtube"
    assert body["recipe"]["title"] == "Bread"
    assert body["recipe"]["ingredients"] == ["flour"]
    assert body["recipe"]["source"] == "https://youtu.be/abc"
    assert body["recipe"]["mediaType"] == "youtube"
    assert body["recipe"]["cookTime"] is None


def test_missing_url_is_invalid_input(client, pipeline_override):
    holder, _ = pipeline_override
    pipeline = FakePipeline()
    holder["pipeline"] = pipeline

    for payload in ({}, {"url": ""}, {"url": "   "}):
        resp = client.post("/api/extract", json=payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidInput"
    assert pipeline.urls == []


def test_malformed_payload_is_invalid_input(client, pipeline_override):
    holder, _ = pipeline_override
    holder["pipeline"] = FakePipeline()

    resp = client.post("/api/detect", json={"url": 123})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "InvalidInput"
    assert body["message"].startswith("Invalid request payload.")


def test_fetch_failure_maps_to_bad_gateway(client, pipeline_override):
    holder, _ = pipeline_override
    try:
        raise httpx.ConnectError("Name or service not known")
    except httpx.ConnectError as cause:
        error = FetchError("https://no-such-host.invalid", "Network error", "webpage")
        error.__cause__ = cause
    holder["pipeline"] = FakePipeline(error=error)

    resp = client.post("/api/extract", json={"url": "https://no-such-host.invalid"})

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"] == "FetchFailure"
    assert body["message"] == "Failed to fetch webpage content from https://no-such-host.invalid: Network error"
    assert "ConnectError" in body["detail"]


def test_inference_failure_maps_to_bad_gateway(client, pipeline_override):
    holder, _ = pipeline_override
    holder["pipeline"] = FakePipeline(error=InferenceError("detection", "response missing hasRecipe", "webpage"))

    resp = client.post("/api/detect", json={"url": "https://example.com"})

    assert resp.status_code == 502
    assert resp.json() == {"error": "InferenceFailure", "message": "AI detection failed: response missing hasRecipe"}


def test_unsupported_media_type_is_bad_request(client, pipeline_override):
    holder, _ = pipeline_override
    holder["pipeline"] = FakePipeline(error=UnsupportedMediaError(MediaType.UNKNOWN))

    resp = client.post("/api/detect", json={"url": "mailto:chef@example.com"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "UnsupportedMediaType"


def test_convert_returns_markdown_and_filename(client, pipeline_override, settings):
    holder, _ = pipeline_override
    holder["pipeline"] = RecipePipeline(settings)

    resp = client.post(
        "/api/convert",
        json={"recipe": {"title": "Grandma's Bread & Butter!", "ingredients": ["bread", "butter"]}},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["fileName"] == "grandma-s-bread---butter-.md"
    assert body["markdown"].startswith("# Grandma's Bread & Butter!\n")
    assert "- butter\n" in body["markdown"]


def test_convert_degrades_instead_of_failing(client, pipeline_override, settings):
    holder, _ = pipeline_override
    holder["pipeline"] = RecipePipeline(settings)

    resp = client.post("/api/convert", json={"recipe": {"ingredients": ["flour"]}})

    assert resp.status_code == 200
    body = resp.json()
    assert body["fileName"] == "recipe.md"
    assert "Error formatting recipe" in body["markdown"]


def test_convert_without_recipe_is_invalid_input(client, pipeline_override, settings):
    holder, _ = pipeline_override
    holder["pipeline"] = RecipePipeline(settings)

    resp = client.post("/api/convert", json={})

    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidInput"


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_malformed_host_is_fetch_failure(client, pipeline_override, settings):
    holder, _ = pipeline_override
    holder["pipeline"] = RecipePipeline(settings)

    resp = client.post("/api/detect", json={"url": "http://exa\u0001mple.com/"})

    assert resp.status_code == 502
    assert resp.headers["content-type"] == "application/json"
    assert resp.json()["error"] == "FetchFailure"


def test_unexpected_error_returns_json_body(app, pipeline_override):
    holder, _ = pipeline_override
    holder["pipeline"] = FakePipeline(error=RuntimeError("boom"))
    client = TestClient(app, raise_server_exceptions=False)

    resp = client.post("/api/extract", json={"url": "https://example.com"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "InternalError"
    assert body["message"] == "An unexpected error occurred"
    assert "boom" in body["detail"]
