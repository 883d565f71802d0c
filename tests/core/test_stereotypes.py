"""
Tests for stereotypes, the notification log and feature settings.
"""

import logging

import pytest

from sysml_bridge.config.settings import get_setting, is_enabled, set_flag, set_setting
from sysml_bridge.core.notifications import NotificationLog, Severity
from sysml_bridge.core.stereotypes import StereotypeService, categories_of
from sysml_bridge.models.design import Class, DataType, Stereotype
from sysml_bridge.models.engineering import Category, ElementDefinition, ElementUsage


@pytest.fixture
def service():
    return StereotypeService()


class TestStereotypeService:

    def test_apply_is_idempotent(self, service):
        element = Class(name="Tank")

        service.apply_stereotype(element, Stereotype.BLOCK)
        service.apply_stereotype(element, "Block")

        assert element.applied_stereotypes == ["Block"]
        assert service.does_it_have_the_stereotype(element, Stereotype.BLOCK)

    def test_known_category_applies_known_stereotype(self, service):
        definition = ElementDefinition(name="Tank", categories=[Category(name="block", short_name="blk")])
        element = Class(name="Tank")

        service.apply_stereotypes_from(definition, element)

        assert element.applied_stereotypes == ["Block"]

    def test_other_category_applies_its_name(self, service):
        definition = ElementDefinition(name="Tank", categories=[Category(name="Equipment", short_name="EQT")])
        element = Class(name="Tank")

        service.apply_stereotypes_from(definition, element)

        assert element.has_stereotype("Equipment")

    def test_usage_inherits_definition_categories(self):
        equipment = Category(name="Equipment")
        spare = Category(name="Spare")
        definition = ElementDefinition(name="Pump", categories=[equipment])
        usage = ElementUsage(name="backup pump", element_definition=definition, categories=[spare])

        assert categories_of(usage) == [spare, equipment]

    def test_property_value_applies_stereotype(self, service):
        data_type = DataType(name="mass[kg]")

        service.set_stereotype_property_value(data_type, Stereotype.VALUE_TYPE, "unit", "kilogram")

        assert data_type.has_stereotype(Stereotype.VALUE_TYPE)
        assert service.get_stereotype_property_value(data_type, Stereotype.VALUE_TYPE, "unit") == "kilogram"
        assert service.get_stereotype_property_value(data_type, Stereotype.UNIT, "symbol", "-") == "-"


class TestNotificationLog:

    def test_append_formats_and_logs(self, caplog):
        log = NotificationLog()

        with caplog.at_level(logging.WARNING):
            entry = log.append("Element [%s] skipped", Severity.WARNING, "Tank")

        assert entry.message == "Element [Tank] skipped"
        assert log.warnings() == [entry]
        assert "Element [Tank] skipped" in caplog.text

    def test_message_without_args_is_not_formatted(self):
        log = NotificationLog()
        log.append("100% mapped")

        assert log.entries[0].message == "100% mapped"
        assert log.entries[0].severity == Severity.INFO
        assert log.warnings() == []

    def test_clear(self):
        log = NotificationLog()
        log.append("done")
        log.clear()

        assert log.entries == []


class TestSettings:

    def test_lenient_parsing_disabled_by_default(self):
        assert is_enabled('lenient_value_parsing') is False

    def test_unknown_flag(self):
        with pytest.raises(KeyError, match="Unknown feature flag"):
            is_enabled('no_such_flag')
        with pytest.raises(KeyError):
            set_flag('no_such_flag', True)

    def test_settings(self):
        previous = get_setting('tool_name')
        set_setting('tool_name', 'other-tool')
        try:
            assert get_setting('tool_name') == 'other-tool'
        finally:
            set_setting('tool_name', previous)

    def test_unknown_setting(self):
        with pytest.raises(KeyError, match="Unknown setting"):
            get_setting('no_such_setting')
