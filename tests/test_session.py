"""Tests for the conversion session and table selections."""

import pytest

from rel2doc.session import ConversionSession, TableSelection
from rel2doc.transform.models import TransformMode


class TestTableSelection:
    @pytest.mark.parametrize(
        "value,table,mode",
        [
            ("STATE", "STATE", TransformMode.SIMPLE),
            ("CITY:embedded", "CITY", TransformMode.EMBEDDED),
            ("CITY:Referenced", "CITY", TransformMode.REFERENCED),
            (" VOTES : junction", "VOTES", TransformMode.JUNCTION),
        ],
    )
    def test_parse(self, value, table, mode) -> None:
        selection = TableSelection.parse(value)

        assert selection.table == table
        assert selection.mode is mode

    def test_missing_table(self) -> None:
        with pytest.raises(ValueError, match="Missing table name"):
            TableSelection.parse(":simple")

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError, match="Valid modes"):
            TableSelection.parse("CITY:nested")


class TestConversionSession:
    def test_add_and_preview(self, state_city, make_client) -> None:
        session = ConversionSession(state_city, make_client(lambda s, p: []))
        session.add("STATE")
        session.add("CITY", "embedded")

        assert session.preview() == "STATE\n  [] CITY"

    def test_add_all_in_order(self, state_city, make_client) -> None:
        session = ConversionSession(state_city, make_client(lambda s, p: []))
        session.add_all([TableSelection.parse("STATE"), TableSelection.parse("CITY:referenced")])

        assert [a.table for a in session.tree.history] == ["STATE", "CITY"]

    def test_generate_and_close(self, state_city, make_client) -> None:
        client = make_client(lambda s, p: [{"STATE.code": "SP", "STATE.name": "Sao Paulo"}])
        session = ConversionSession(state_city, client)
        session.add("STATE")

        result = session.generate(include_indexes=True)
        session.close()

        assert result.success
        assert '\t{_id: {code: "SP"}, name: "Sao Paulo"}\n' in result.script
        assert 'db.STATE.createIndex({"_id.code": 1}, {unique: true})' in result.script
        assert client.closed
