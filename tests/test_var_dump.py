"""Tests for the VarDump renderer."""

from nova.core.var_dump import VarDump


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y


def test_scalars():
    dumper = VarDump()
    assert dumper.dump_type(None) == "NULL"
    assert dumper.dump_type(True) == "bool(true)"
    assert dumper.dump_type(7) == "int(7)"
    assert dumper.dump_type(1.5) == "float(1.5)"
    assert dumper.dump_type("hey") == 'string(3) "hey"'


def test_nested_containers_and_objects():
    text = VarDump().dump_type({"p": Point(1, [2])})
    assert "dict(1) {" in text
    assert "object(Point) {" in text
    assert '["x"] =>' in text
    assert "list(1) {" in text


def test_recursion_is_cut():
    items = [1]
    items.append(items)
    assert "*RECURSION* list" in VarDump().dump_type(items)


def test_html_output_is_escaped():
    html = VarDump(html_output=True).dump_type("<b>")
    assert "&lt;b&gt;" in html
    assert "<b>" not in html
