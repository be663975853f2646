"""Tests for the dial code resolver."""

import pytest

from call_forwarding.carriers import CarrierCatalog, CarrierFamily, CarrierProfile
from call_forwarding.dial_codes import (
    AppManaged,
    ForwardingMode,
    LiteralCode,
    Transition,
    Unavailable,
    UnavailableReason,
    resolve,
    resolve_all,
)
from call_forwarding.dial_codes.resolver import format_number_for_family
from call_forwarding.phone_numbers import AssignedNumber, is_default_region

NUMBER = AssignedNumber(number="(555) 123-4567")


class TestResolve:
    """Test cases for resolve()."""

    @pytest.fixture
    def gsm(self):
        return CarrierProfile(name="CarrierX", family=CarrierFamily.GSM)

    @pytest.fixture
    def cdma(self):
        return CarrierProfile(name="CarrierZ", family=CarrierFamily.CDMA_STYLE)

    @pytest.fixture
    def app_managed(self):
        return CarrierProfile(
            name="CarrierY",
            family=CarrierFamily.APP_MANAGED,
            app_instructions="Open the CarrierY app.",
        )

    def test_gsm_enable_conditional(self, gsm):
        code = resolve(gsm, NUMBER, Transition.ENABLE_CONDITIONAL)

        assert isinstance(code, LiteralCode)
        assert code.code == "**61*+15551234567**25#"

    @pytest.mark.parametrize(
        "transition,expected",
        [
            (Transition.DISABLE_CONDITIONAL, "##61#"),
            (Transition.ENABLE_UNCONDITIONAL, "**21*+15551234567#"),
            (Transition.DISABLE_UNCONDITIONAL, "##21#"),
        ],
    )
    def test_gsm_other_transitions(self, gsm, transition, expected):
        assert resolve(gsm, NUMBER, transition).code == expected

    @pytest.mark.parametrize(
        "transition,expected",
        [
            (Transition.ENABLE_CONDITIONAL, "*71 5551234567"),
            (Transition.DISABLE_CONDITIONAL, "*73"),
            (Transition.ENABLE_UNCONDITIONAL, "*72 5551234567"),
            (Transition.DISABLE_UNCONDITIONAL, "*73"),
        ],
    )
    def test_cdma_style_codes(self, cdma, transition, expected):
        assert resolve(cdma, NUMBER, transition).code == expected

    @pytest.mark.parametrize("transition", list(Transition))
    def test_app_managed_never_literal(self, app_managed, transition):
        code = resolve(app_managed, NUMBER, transition)

        assert isinstance(code, AppManaged)
        assert code.instructions == "Open the CarrierY app."

    def test_conditional_unsupported(self):
        profile = CarrierProfile(
            name="CarrierW", family=CarrierFamily.GSM, supports_conditional=False
        )

        for transition in (Transition.ENABLE_CONDITIONAL, Transition.DISABLE_CONDITIONAL):
            code = resolve(profile, NUMBER, transition)
            assert isinstance(code, Unavailable)
            assert code.reason == UnavailableReason.MODE_NOT_SUPPORTED
            assert "CarrierW" in code.message

        # The unconditional axis is unaffected.
        assert isinstance(resolve(profile, NUMBER, Transition.ENABLE_UNCONDITIONAL), LiteralCode)

    def test_no_number(self, gsm):
        code = resolve(gsm, None, Transition.ENABLE_UNCONDITIONAL)

        assert isinstance(code, Unavailable)
        assert code.reason == UnavailableReason.NO_NUMBER

    def test_no_number_takes_precedence_for_app_managed(self, app_managed):
        code = resolve(app_managed, None, Transition.ENABLE_CONDITIONAL)
        assert isinstance(code, Unavailable)

    def test_missing_template(self):
        profile = CarrierProfile(
            name="Partial",
            family=CarrierFamily.GSM,
            templates={"unconditional_enable": "**21*{number}#"},
        )

        code = resolve(profile, NUMBER, Transition.DISABLE_UNCONDITIONAL)
        assert isinstance(code, Unavailable)
        assert code.reason == UnavailableReason.NO_TEMPLATE

    def test_resolution_is_deterministic(self, gsm):
        first = resolve(gsm, NUMBER, Transition.ENABLE_UNCONDITIONAL)
        second = resolve(gsm, NUMBER, Transition.ENABLE_UNCONDITIONAL)
        assert first == second

    def test_dial_uri_escapes_hash(self, gsm):
        code = resolve(gsm, NUMBER, Transition.ENABLE_CONDITIONAL)
        assert code.dial_uri == "tel:%2A%2A61%2A+15551234567%2A%2A25%23"

    def test_cdma_dial_uri_drops_space(self, cdma):
        code = resolve(cdma, NUMBER, Transition.ENABLE_UNCONDITIONAL)
        assert code.dial_uri == "tel:%2A725551234567"


class TestResolveAll:
    """Test cases for resolve_all()."""

    def test_all_four_transitions(self):
        profile = CarrierProfile(
            name="CarrierZ", family=CarrierFamily.CDMA_STYLE, supports_conditional=False
        )

        codes = resolve_all(profile, NUMBER)

        assert isinstance(codes.conditional_enable, Unavailable)
        assert isinstance(codes.conditional_disable, Unavailable)
        assert codes.unconditional_enable.code == "*72 5551234567"
        assert codes.for_transition(Transition.DISABLE_UNCONDITIONAL).code == "*73"

    def test_builtin_catalog_resolves_every_carrier(self):
        for profile in CarrierCatalog.builtin():
            codes = resolve_all(profile, NUMBER)
            for transition in Transition:
                code = codes.for_transition(transition)
                if profile.is_app_managed:
                    assert isinstance(code, AppManaged)
                elif (
                    transition.mode == ForwardingMode.CONDITIONAL
                    and not profile.supports_conditional
                ):
                    assert isinstance(code, Unavailable)
                else:
                    assert isinstance(code, LiteralCode)
                    assert "{number}" not in code.code

    def test_codes_serialize_with_kind(self):
        profile = CarrierProfile(name="CarrierY", family=CarrierFamily.APP_MANAGED)
        dumped = resolve_all(profile, NUMBER).model_dump(mode="json")
        assert dumped["conditional_enable"]["kind"] == "app_managed"


class TestInternationalDestination:
    """Numbers outside the default region keep their country code."""

    NUMBER = AssignedNumber(number="+44 20 7946 0018")

    def test_cdma_style_uses_international_number(self):
        profile = CarrierProfile(name="CarrierZ", family=CarrierFamily.CDMA_STYLE)

        code = resolve(profile, self.NUMBER, Transition.ENABLE_UNCONDITIONAL)

        assert code.code == "*72 +442079460018"

    def test_gsm_unchanged(self):
        profile = CarrierProfile(name="CarrierX", family=CarrierFamily.GSM)

        code = resolve(profile, self.NUMBER, Transition.ENABLE_UNCONDITIONAL)

        assert code.code == "**21*+442079460018#"

    @pytest.mark.parametrize(
        "number,expected",
        [("+15551234567", True), ("(555) 123-4567", True), ("+442079460018", False)],
    )
    def test_is_default_region(self, number, expected):
        assert is_default_region(number) is expected


@pytest.mark.parametrize(
    "family,expected",
    [
        (CarrierFamily.GSM, "+15551234567"),
        (CarrierFamily.CDMA_STYLE, "5551234567"),
    ],
)
def test_format_number_for_family(family, expected):
    assert format_number_for_family("+1 555-123-4567", family) == expected
