import json

import pytest

from onec_mcp.models import (
    Attribute,
    ConfigurationInfo,
    Counterparty,
    CreateCounterpartyRequest,
    CreateCounterpartyResult,
    EventLogEntry,
    EventLogRequest,
    EventLogResult,
    FormCommand,
    FormElement,
    FormHandler,
    FormStructure,
    ObjectStructure,
    QueryRequest,
    QueryResult,
    ReadCounterpartiesRequest,
    ReadCounterpartiesResult,
    TabularPart,
    ValidateQueryRequest,
    ValidateQueryResult,
    VersionInfo,
)


def test_object_structure_round_trip():
    obj = ObjectStructure(
        name="Номенклатура",
        synonym="Номенклатура",
        attributes=[Attribute(name="Артикул", synonym="Артикул", type="Строка")],
        tabular_parts=[TabularPart(name="Состав", attributes=[Attribute(name="Количество")])],
        dimensions=[Attribute(name="Склад")],
        resources=[Attribute(name="Сумма")],
    )
    data = json.loads(json.dumps(obj.to_dict()))
    assert ObjectStructure.from_dict(data) == obj
    assert "tabularParts" in data


def test_object_structure_omits_empty_optional_lists():
    data = ObjectStructure(name="X").to_dict()
    assert "tabularParts" not in data
    assert "dimensions" not in data
    assert "resources" not in data
    assert data["attributes"] == []


def test_form_structure_round_trip():
    form = FormStructure(
        name="ФормаЭлемента",
        title="Элемент",
        elements=[FormElement(name="Поле", type="InputField", title="T", data_path="Объект.Поле")],
        commands=[FormCommand(name="Записать", action="Записать")],
        handlers=[FormHandler(event="OnOpen", handler="ПриОткрытии")],
    )
    data = form.to_dict()
    assert data["elements"][0]["dataPath"] == "Объект.Поле"
    assert FormStructure.from_dict(data) == form


def test_form_element_omits_empty_title_and_path():
    data = FormElement(name="Поле", type="InputField").to_dict()
    assert set(data) == {"name", "type"}


def test_query_request_keeps_limit_and_omits_empty_parameters():
    data = QueryRequest(query="ВЫБРАТЬ 1").to_dict()
    assert data == {"query": "ВЫБРАТЬ 1", "limit": 0}
    with_params = QueryRequest(query="q", limit=10, parameters={"Дата": "2024-01-01"})
    assert QueryRequest.from_dict(with_params.to_dict()) == with_params


def test_query_result_from_dict():
    result = QueryResult.from_dict(
        {"columns": ["a"], "rows": [[1, "x"]], "total": 1, "truncated": True}
    )
    assert result.rows == [[1, "x"]]
    assert result.truncated is True
    assert QueryResult.from_dict(result.to_dict()) == result


def test_validate_query_result_omits_errors():
    assert ValidateQueryResult(valid=True).to_dict() == {"valid": True}
    failed = ValidateQueryResult(valid=False, errors=["bad"])
    assert ValidateQueryResult.from_dict(failed.to_dict()) == failed


def test_event_log_request_empty_is_empty_object():
    assert EventLogRequest().to_dict() == {}
    req = EventLogRequest(start_date="2024-01-01", level="Error", limit=5)
    data = req.to_dict()
    assert set(data) == {"start_date", "level", "limit"}
    assert EventLogRequest.from_dict(data) == req


def test_event_log_result_nested_entries():
    entry = EventLogEntry(date="d", level="l", event="e", user="u", comment="c")
    result = EventLogResult(events=[entry], total=1)
    data = result.to_dict()
    assert "computer" not in data["events"][0]
    assert EventLogResult.from_dict(data) == result


def test_configuration_info_keys():
    info = ConfigurationInfo.from_dict(
        {"name": "БухгалтерияПредприятия", "version": "3.0.150.1", "platform_version": "8.3.24"}
    )
    assert info.platform_version == "8.3.24"
    assert info.vendor == ""
    assert ConfigurationInfo.from_dict(info.to_dict()) == info


def test_counterparty_models_round_trip():
    cp = Counterparty(ref="r", code="c", name="n", inn="i", kpp="k")
    assert "counterparty_type" not in cp.to_dict()
    read = ReadCounterpartiesResult(counterparties=[cp], total=1, truncated=False)
    assert ReadCounterpartiesResult.from_dict(read.to_dict()) == read
    created = CreateCounterpartyResult(success=True, counterparty=cp)
    assert CreateCounterpartyResult.from_dict(created.to_dict()) == created


def test_create_counterparty_request_keeps_empty_fields():
    data = CreateCounterpartyRequest(name="ООО").to_dict()
    assert set(data) == {"name", "inn", "kpp", "counterparty_type"}


def test_read_counterparties_request_omits_empty():
    req = ReadCounterpartiesRequest(search="Рога", limit=10)
    assert set(req.to_dict()) == {"search", "limit"}


def test_misc_round_trips():
    assert VersionInfo.from_dict(VersionInfo(version="1.2").to_dict()).version == "1.2"
    assert ValidateQueryRequest.from_dict({"query": "q"}).query == "q"


def test_from_dict_ignores_unknown_and_null():
    info = VersionInfo.from_dict({"version": None, "extra": 1})
    assert info.version == ""


def test_from_dict_rejects_non_object():
    with pytest.raises(TypeError):
        VersionInfo.from_dict(["not", "an", "object"])