# Test type: integration
# Validation: HTTP endpoints, status codes and error bodies
# Command: pytest test/test_api.py -v

import re
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from fincalc.main import BASE, MSG_BAD_REQUEST, app, request_error_message
from routes.performance import uptime_text

_client = TestClient(app)


def _post(path: str, body: dict):
    return _client.post(f"{BASE}{path}", json=body)


# ---------------------------------------------------------------------------
# Calculators
# ---------------------------------------------------------------------------

class TestCalculatorEndpoint:
    def test_fd(self):
        resp = _post("/calculators/fd", {"params": {"principal": 100000, "rate": 7, "tenureYears": 5}})
        assert resp.status_code == 200
        data = resp.json()
        assert data["errors"] == []
        assert data["result"]["maturityAmount"] == pytest.approx(141477.82, abs=0.01)
        assert len(data["result"]["evolution"]) == 5

    def test_invalid_params_are_not_an_http_error(self):
        resp = _post("/calculators/fd", {"params": {"principal": 500, "rate": 7, "tenureYears": 5}})
        assert resp.status_code == 200
        assert resp.json() == {"result": None, "errors": ["Principal amount must be at least 1,000"]}

    def test_unknown_instrument_is_404(self):
        resp = _post("/calculators/lottery", {"params": {}})
        assert resp.status_code == 404
        assert "lottery" in resp.json()["detail"]

    def test_bad_preferences_are_400(self):
        resp = _post("/calculators/fd", {"params": {}, "preferences": {"incomeTaxSlab": 2}})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Income tax slab must be a decimal between 0 and 1"

    def test_inflation_preferences(self):
        body = {
            "params": {"principal": 100000, "rate": 7, "tenureYears": 5},
            "preferences": {"adjustInflation": True, "defaultInflationRate": 6},
        }
        result = _post("/calculators/fd", body).json()["result"]
        assert result["realMaturityAmount"] == pytest.approx(141477.82 / 1.06 ** 5, abs=0.01)

    def test_sgb_uses_fallback_price(self):
        result = _post("/calculators/sgb", {"params": {"gramsOfGold": 10}}).json()["result"]
        assert result["investedAmount"] == 65000
        assert result["details"]["goldPriceIsRealTime"] is False

    def test_sgb_uses_provider(self):
        class _Provider:
            def get_price_per_gram(self, force_refresh=False):
                return 7000.0

        app.state.gold_price_provider = _Provider()
        try:
            result = _post("/calculators/sgb", {"params": {"gramsOfGold": 10}}).json()["result"]
        finally:
            app.state.gold_price_provider = None
        assert result["investedAmount"] == 70000
        assert result["details"]["goldPriceIsRealTime"] is True


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------

class TestTaxEndpoints:
    def test_sip_scenario(self):
        resp = _post("/tax", {"corpus": 1600000, "instrument": "sip", "tenure": 10, "returns": 1100000})
        assert resp.status_code == 200
        data = resp.json()
        assert data["taxAmount"] == pytest.approx(100000.0)
        assert data["variant"] == "ltcg"

    def test_missing_corpus(self):
        resp = _post("/tax", {"instrument": "sip", "tenure": 10})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Corpus is required"

    def test_negative_tenure(self):
        resp = _post("/tax", {"corpus": 1000, "instrument": "fd", "tenure": -1})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Tenure must be non-negative"

    def test_portfolio(self):
        body = {
            "instruments": ["ppf", "nps"],
            "corpusByInstrument": {"ppf": 200000, "nps": 1000000},
            "investments": {"ppf": {"tenure": 15}, "nps": {"tenure": 20}},
        }
        data = _post("/tax:portfolio", body).json()
        assert data["byInstrument"]["ppf"]["taxAmount"] == 0.0
        assert data["totalTaxAmount"] == pytest.approx(120000.0)

    def test_portfolio_both(self):
        body = {
            "instruments": ["fd"],
            "corpusByInstrument": {"fd": 114490},
            "investments": {"fd": {"principal": 100000, "tenure": 2}},
            "method": "both",
        }
        entry = _post("/tax:portfolio", body).json()["byInstrument"]["fd"]
        assert entry["comparison"]["moreBeneficial"] in ("withdrawal", "accumulation")


# ---------------------------------------------------------------------------
# Corpus
# ---------------------------------------------------------------------------

class TestCorpusEndpoints:
    def test_corpus(self):
        body = {
            "selectedInstruments": ["ppf", "sip"],
            "investments": {
                "ppf": {"yearlyInvestment": 10000, "rate": 7.1, "tenure": 15},
                "sip": {"monthlySIP": 5000, "expectedReturn": 12, "tenure": 10},
            },
            "timeHorizon": 20,
        }
        data = _post("/corpus", body).json()
        assert data["totalInvested"] == pytest.approx(150000 + 600000)
        assert set(data["byInstrument"]) == {"ppf", "sip"}

    def test_real_corpus_and_purchasing_power(self):
        body = {
            "selectedInstruments": ["ppf"],
            "investments": {"ppf": {"yearlyInvestment": 10000, "rate": 7.1, "tenure": 15}},
            "timeHorizon": 15,
            "preferences": {"defaultInflationRate": 5},
            "city": "pune",
            "purchasingPowerCategories": ["education", "consumerGoods"],
            "categoryInflationRates": {"education": 12},
        }
        data = _post("/corpus", body).json()
        assert data["realCorpus"] == pytest.approx(data["nominalCorpus"] / 1.05 ** 15, abs=0.02)
        power = data["purchasingPower"]
        assert set(power["categories"]) == {"education", "consumerGoods"}
        assert power["categories"]["education"][0]["inflationRate"] == 12.0
        assert power["summary"]["totalExamples"] == 6

    def test_no_city_no_purchasing_power(self):
        body = {"selectedInstruments": ["ppf"], "investments": {}, "timeHorizon": 10}
        assert _post("/corpus", body).json()["purchasingPower"] is None

    def test_bad_category_rate(self):
        body = {"selectedInstruments": ["ppf"], "timeHorizon": 10, "categoryInflationRates": {"education": 150}}
        resp = _post("/corpus", body)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Inflation rate must be between 0 and 100"

    def test_missing_horizon(self):
        resp = _post("/corpus", {"selectedInstruments": ["ppf"]})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Time horizon is required"

    def test_validate(self):
        body = {"selectedInstruments": ["ppf"], "investments": {}, "timeHorizon": 10}
        data = _post("/corpus:validate", body).json()
        assert data == {"valid": False, "errors": ["PPF: Yearly Investment, Tenure, Interest Rate"]}


# ---------------------------------------------------------------------------
# Performance
# ---------------------------------------------------------------------------

class TestPerformance:
    def test_shape(self):
        resp = _client.get(f"{BASE}/performance")
        assert resp.status_code == 200
        data = resp.json()
        assert re.fullmatch(r"\d{2,}:\d{2}:\d{2}\.\d{3}", data["time"])
        assert re.fullmatch(r"\d+\.\d{2}", data["memory"])
        assert data["threads"] >= 1

    @pytest.mark.parametrize(
        "uptime, text",
        [
            (timedelta(seconds=0), "00:00:00.000"),
            (timedelta(minutes=2, seconds=3, milliseconds=45), "00:02:03.045"),
            (timedelta(days=1, hours=1), "25:00:00.000"),
        ],
    )
    def test_uptime_text(self, uptime, text):
        assert uptime_text(uptime) == text


# ---------------------------------------------------------------------------
# Request errors
# ---------------------------------------------------------------------------

class TestRequestErrors:
    def test_model_message_kept_as_written(self):
        errors = [{"type": "value_error", "loc": ("body", "corpus"), "msg": "Value error, Corpus is required"}]
        assert request_error_message(errors) == "Corpus is required"

    def test_shape_error_names_the_field(self):
        errors = [{"type": "list_type", "loc": ("body", "selectedInstruments"), "msg": "Input should be a valid list"}]
        assert request_error_message(errors) == "selectedInstruments: Input should be a valid list"

    def test_no_errors(self):
        assert request_error_message([]) == MSG_BAD_REQUEST

    def test_wrong_shape_is_400(self):
        resp = _post("/corpus", {"selectedInstruments": "ppf", "timeHorizon": 10})
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("selectedInstruments: ")
