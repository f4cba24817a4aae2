"""Integration tests for the API endpoints."""

import pytest
from fastapi.testclient import TestClient
from kb_matcher.config.settings import DEFAULT_SEED_PATH
from kb_matcher.core.engine import MatchingEngine
from kb_matcher.main import create_app
from kb_matcher.repository import EntryLoader


class TestAPI:
    """Integration tests for API endpoints."""
    
    @pytest.fixture
    def client(self, loader, settings):
        """Create a test client over the sample entries."""
        engine = MatchingEngine(loader, settings=settings)
        with TestClient(create_app(engine=engine, settings=settings)) as client:
            yield client
    
    @pytest.fixture
    def degraded_client(self, unavailable_repository, settings):
        """Create a test client whose entry store is offline."""
        loader = EntryLoader(unavailable_repository, DEFAULT_SEED_PATH)
        engine = MatchingEngine(loader, settings=settings)
        with TestClient(create_app(engine=engine, settings=settings)) as client:
            yield client
    
    def test_root_endpoint(self, client, settings):
        """Test the root endpoint."""
        response = client.get("/")
        assert response.status_code == 200
        
        data = response.json()
        assert data["name"] == settings.app_name
        assert data["version"] == settings.app_version
        assert data["status"] == "running"
    
    def test_exact_match(self, client):
        """Test an exact phrasing hit."""
        response = client.get("/api/v1/matches", params={"q": "How do I reset my password?"})
        assert response.status_code == 200
        
        data = response.json()
        assert data["exact_match"] is True
        assert data["total_results"] == 1
        assert data["matches"][0]["entry"]["id"] == "password-reset"
        assert data["matches"][0]["confidence"] == 1.0
        assert data["matches"][0]["match_type"] == "exact"
    
    def test_ranked_match(self, client):
        """Test keyword and fuzzy matching through the API."""
        response = client.get(
            "/api/v1/matches",
            params={"q": "my password is not working", "max_results": 5, "min_confidence": 0.3}
        )
        assert response.status_code == 200
        
        data = response.json()
        assert data["exact_match"] is False
        assert data["total_results"] <= 5
        assert "password-reset" in [m["entry"]["id"] for m in data["matches"]]
    
    def test_match_with_body(self, client):
        """Test POST matching with a JSON body."""
        response = client.post(
            "/api/v1/matches",
            json={"query": "  VPN not working  ", "max_results": 2}
        )
        assert response.status_code == 200
        
        data = response.json()
        assert data["query"] == "VPN not working"
        assert data["matches"][0]["entry"]["id"] == "vpn-issues"
    
    def test_no_match(self, client):
        """Test a query with no matches."""
        response = client.get("/api/v1/matches", params={"q": "zqxjkvbw"})
        assert response.status_code == 200
        
        data = response.json()
        assert data["total_results"] == 0
        assert data["matches"] == []
    
    def test_best_match_substitution(self, client):
        """Test placeholder resolution in the best match."""
        response = client.get(
            "/api/v1/matches/best",
            params={"q": "I forgot my password", "substitution": "555-1234"}
        )
        assert response.status_code == 200
        
        answer = response.json()["match"]["entry"]["answer"]
        assert "555-1234" in answer
        assert "{SUPPORT_PHONE}" not in answer
    
    def test_best_match_with_body(self, client, settings):
        response = client.post("/api/v1/matches/best", json={"query": "Password reset"})
        assert response.status_code == 200
        assert settings.default_substitution in response.json()["match"]["entry"]["answer"]
    
    def test_best_match_not_found(self, client):
        """Test 404 when nothing clears the confidence floor."""
        response = client.get("/api/v1/matches/best", params={"q": "zqxjkvbw"})
        assert response.status_code == 404
    
    def test_query_too_long(self, client, settings):
        """Test rejection of oversized queries."""
        response = client.get(
            "/api/v1/matches", params={"q": "a" * (settings.max_query_length + 1)}
        )
        assert response.status_code == 400
    
    def test_invalid_parameters(self, client):
        """Test request validation."""
        assert client.get("/api/v1/matches").status_code == 422
        assert client.get("/api/v1/matches", params={"q": "vpn", "max_results": 0}).status_code == 422
        assert client.get("/api/v1/matches", params={"q": "vpn", "min_confidence": 1.5}).status_code == 422
        assert client.post("/api/v1/matches", json={"query": "   "}).status_code == 422
    
    def test_list_entries(self, client, sample_records):
        response = client.get("/api/v1/entries")
        assert response.status_code == 200
        
        data = response.json()
        assert data["total"] == len(sample_records)
    
    def test_categories(self, client):
        """Test entries grouped by category."""
        response = client.get("/api/v1/entries/categories")
        assert response.status_code == 200
        
        data = response.json()
        assert data["total_categories"] == 4
        assert data["categories"]["Network & Internet"][0]["id"] == "vpn-issues"
    
    def test_reload(self, client, sample_records):
        """Test explicit reload."""
        response = client.post("/api/v1/entries/reload")
        assert response.status_code == 200
        
        data = response.json()
        assert data["status"] == "reloaded"
        assert data["total_entries"] == len(sample_records)
        assert data["source"] == "memory"
        assert data["skipped_entries"] == 0
    
    def test_usage(self, client):
        """Test usage statistics after a matched query."""
        client.get("/api/v1/matches", params={"q": "VPN not working"})
        
        response = client.get("/api/v1/usage")
        assert response.status_code == 200
        
        data = response.json()
        assert data["total_queries"] >= 4
        assert data["per_category_totals"]["Email & Communication"] == 4
        assert data["tracker"]["dispatched"] >= 1
    
    def test_health_check(self, client, sample_records):
        """Test the health check endpoint."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        
        data = response.json()
        assert data["status"] == "healthy"
        assert data["entries_loaded"] == len(sample_records)
        assert data["entry_source"] == "memory"
        assert data["dependencies"]["entry_store"] == "healthy"
    
    def test_health_degraded_on_seed_fallback(self, degraded_client):
        """Test that serving the seed set reports degraded health."""
        response = degraded_client.get("/api/v1/health")
        assert response.status_code == 200
        
        data = response.json()
        assert data["status"] == "degraded"
        assert data["entry_source"] == "seed"
        assert data["dependencies"]["entry_store"] == "degraded"
    
    def test_seed_fallback_still_matches(self, degraded_client):
        response = degraded_client.get("/api/v1/matches", params={"q": "VPN not working"})
        assert response.status_code == 200
        assert response.json()["matches"][0]["entry"]["id"] == "vpn-issues"
    
    def test_metrics(self, client):
        """Test the engine metrics endpoint."""
        client.get("/api/v1/matches", params={"q": "VPN not working"})
        
        response = client.get("/api/v1/metrics")
        assert response.status_code == 200
        
        data = response.json()
        assert data["total_queries"] >= 1
        assert data["exact_matches"] >= 1
        assert "usage_tracker" in data
