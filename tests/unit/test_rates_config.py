"""Tests for tax schedule loading, jurisdiction fallback and settings.

Uses BUDGET_CALC_CONFIG_PATH to isolate settings.json in a temp directory.
"""

import json

import pytest
from pydantic import ValidationError

from budgetcalc.sdk import derive
from budgetcalc.sdk.config import (
    clear_setting,
    get_budgets_dir,
    get_config_dir,
    get_setting,
    load_settings,
    set_setting,
)
from budgetcalc.sdk.rates import (
    TaxRatesNotFoundError,
    get_bundled_rates_dir,
    get_tax_rates_dir,
    list_jurisdictions,
    load_tax_rates,
    resolve_jurisdiction,
)
from budgetcalc.sdk.taxes import BracketStateTax, FlatStateTax, NoStateTax, TaxRatesFile


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point config and data directories at a temp directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("BUDGET_CALC_CONFIG_PATH", str(config_dir))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return config_dir


def minimal_rates(states):
    return TaxRatesFile.model_validate({
        "federal": {"brackets": []},
        "fica": {"oasdi_rate": 0.062, "oasdi_wage_base": 160000, "medicare_rate": 0.0145},
        "states": states,
    })


class TestBundledRates:
    """Tests for the tax schedules shipped with the package."""

    @pytest.mark.parametrize("filing_status", ["single", "married"])
    def test_loads(self, isolated_config, filing_status):
        rates = load_tax_rates(filing_status)
        assert rates.federal.brackets
        assert rates.federal.brackets[-1].upper is None
        assert "New Jersey" in rates.states

    def test_state_types(self, isolated_config):
        rates = load_tax_rates("single")
        assert isinstance(rates.states["Texas"], NoStateTax)
        assert isinstance(rates.states["Illinois"], FlatStateTax)
        assert isinstance(rates.states["New Jersey"], BracketStateTax)

    def test_brackets_contiguous(self, isolated_config):
        for status in ("single", "married"):
            brackets = load_tax_rates(status).federal.brackets
            for lower, upper in zip(brackets, brackets[1:]):
                assert lower.upper == upper.lower

    def test_married_wider_brackets(self, isolated_config):
        single = load_tax_rates("single").federal
        married = load_tax_rates("married").federal
        assert married.standard_deduction > single.standard_deduction
        assert married.brackets[0].upper > single.brackets[0].upper

    def test_realistic_derivation(self, isolated_config):
        """Single, Texas, 100000: federal 13614, OASDI 6200, Medicare 1450."""
        rates = load_tax_rates("single")
        snap = derive(100000, [], [], rates, "Texas")
        by_key = {t.tax_key: t.amount_annual for t in snap.taxes}
        assert by_key["federal"] == pytest.approx(13614)
        assert by_key["oasdi"] == pytest.approx(6200)
        assert by_key["medicare"] == pytest.approx(1450)
        assert by_key["state"] == 0.0
        assert snap.post_tax_base == pytest.approx(78736)

    def test_unknown_filing_status(self, isolated_config):
        with pytest.raises(TaxRatesNotFoundError, match="Unknown filing status"):
            load_tax_rates("head_of_household")


class TestCustomRatesDir:
    """Tests for the tax_rates_dir setting."""

    def test_default_is_bundled(self, isolated_config):
        assert get_tax_rates_dir() == get_bundled_rates_dir()

    def test_setting_overrides(self, isolated_config, tmp_path):
        custom = tmp_path / "rates"
        custom.mkdir()
        (custom / "tax_rates_single.yaml").write_text(
            "federal:\n"
            "  brackets:\n"
            "    - {lower: 0, upper: INF, rate: 0.15}\n"
            "fica: {oasdi_rate: 0.062, oasdi_wage_base: 100000, medicare_rate: 0.0145}\n"
            "states:\n"
            "  Freedonia: {type: flat, rate: 0.01}\n"
        )
        set_setting("tax_rates_dir", str(custom))

        rates = load_tax_rates("single")
        assert list_jurisdictions(rates) == ["Freedonia"]

    def test_missing_file(self, isolated_config, tmp_path):
        set_setting("tax_rates_dir", str(tmp_path / "empty"))
        with pytest.raises(TaxRatesNotFoundError, match="not found"):
            load_tax_rates("married")

    def test_malformed_document(self, isolated_config, tmp_path):
        custom = tmp_path / "bad"
        custom.mkdir()
        (custom / "tax_rates_single.yaml").write_text("federal: {brackets: [{lower: -5, rate: 0.1}]}\n")
        with pytest.raises(ValidationError):
            load_tax_rates("single", rates_dir=custom)


class TestResolveJurisdiction:
    """Tests for jurisdiction fallback."""

    def test_known(self):
        rates = minimal_rates({"Ohio": {"type": "none"}, "New Jersey": {"type": "none"}})
        assert resolve_jurisdiction(rates, "Ohio") == "Ohio"

    def test_unknown_falls_back_to_new_jersey(self):
        rates = minimal_rates({"Ohio": {"type": "none"}, "New Jersey": {"type": "none"}})
        assert resolve_jurisdiction(rates, "Atlantis") == "New Jersey"

    def test_no_request(self):
        rates = minimal_rates({"Ohio": {"type": "none"}, "New Jersey": {"type": "none"}})
        assert resolve_jurisdiction(rates) == "New Jersey"

    def test_first_sorted_without_new_jersey(self):
        rates = minimal_rates({"Ohio": {"type": "none"}, "Maine": {"type": "none"}})
        assert resolve_jurisdiction(rates, "Atlantis") == "Maine"

    def test_empty_schedule(self):
        assert resolve_jurisdiction(minimal_rates({})) == "Alaska"


class TestSettings:
    """Tests for settings.json handling."""

    def test_config_dir_from_env(self, isolated_config):
        assert get_config_dir() == isolated_config

    def test_empty_without_file(self, isolated_config):
        assert load_settings() == {}
        assert get_setting("state", "New Jersey") == "New Jersey"

    def test_set_and_get(self, isolated_config):
        path = set_setting("state", "Oregon")
        assert path == isolated_config / "settings.json"
        assert json.loads(path.read_text()) == {"state": "Oregon"}
        assert get_setting("state") == "Oregon"

    def test_unknown_key(self, isolated_config):
        with pytest.raises(ValueError, match="Unknown setting"):
            set_setting("colour", "blue")

    def test_clear(self, isolated_config):
        set_setting("timeframe", "week")
        assert clear_setting("timeframe") is True
        assert clear_setting("timeframe") is False
        assert get_setting("timeframe") is None

    def test_budgets_dir_default(self, isolated_config, tmp_path):
        assert get_budgets_dir() == tmp_path / "data" / "budget-calc" / "budgets"

    def test_budgets_dir_setting(self, isolated_config, tmp_path):
        set_setting("budgets_dir", str(tmp_path / "mine"))
        assert get_budgets_dir() == tmp_path / "mine"
