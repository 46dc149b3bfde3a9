"""Tests for the macro transformation and the reference macros."""

from lxml import etree

from python_refnotes.errors import MacroExecutionError
from python_refnotes.macros import (
    Macro,
    MacroDescriptor,
    ReferenceMacro,
    ReferenceMacroParameters,
    ReferencesMacro,
)
from python_refnotes.nodes import find_all, get_text, is_references, make_word
from python_refnotes.settings import ReferencesSettings
from python_refnotes.transformation import MacroTransformation, default_transformation


def build(xml: str) -> etree._Element:
    return etree.fromstring(xml)


class RecordingMacro(Macro):
    """Macro that records its executions in a shared log."""

    descriptor = MacroDescriptor(name="Recording", description="Records executions.")

    def __init__(self, name, log, priority=1000, inline=True, output=None):
        self.id = name
        self._log = log
        self._priority = priority
        self._inline = inline
        self._output = output

    @property
    def priority(self):
        return self._priority

    @property
    def supports_inline_mode(self):
        return self._inline

    def execute(self, parameters, content, context):
        self._log.append((self.id, content, parameters))
        if self._output is None:
            return []
        return [make_word(self._output)]


class FailingMacro(Macro):
    id = "broken"
    descriptor = MacroDescriptor(name="Broken", description="Always fails.")

    def execute(self, parameters, content, context):
        raise MacroExecutionError(self.id, "nope")


class TestReferenceMacroDescriptors:
    """Tests for macro metadata."""

    def test_reference_macro(self):
        """Test the reference macro is inline-capable and runs early."""
        macro = ReferenceMacro()
        assert macro.id == "reference"
        assert macro.supports_inline_mode is True
        assert macro.priority == 500
        assert macro.descriptor.name == "Reference"
        assert macro.descriptor.content_description == "the text to place in the reference"
        assert macro.descriptor.default_category == "Content"
        assert macro.parameters_class is ReferenceMacroParameters

    def test_references_macro(self):
        """Test the references macro is block-only with default priority."""
        macro = ReferencesMacro()
        assert macro.id == "references"
        assert macro.supports_inline_mode is False
        assert macro.priority == 1000
        assert macro.descriptor.name == "Put References"

    def test_priorities_from_settings(self):
        """Test priorities can be configured."""
        settings = ReferencesSettings(ensurer_priority=10, default_priority=20)
        assert ReferenceMacro(settings).priority == 10
        assert ReferencesMacro(settings).priority == 20


class TestMacroTransformation:
    """Tests for the generic transformation loop."""

    def test_priority_then_document_order(self):
        """Test lower priorities run first, ties in document order."""
        log = []
        transformation = MacroTransformation(
            macros=[RecordingMacro("late", log, 1000), RecordingMacro("early", log, 500)]
        )
        root = build(
            "<document>"
            '<macro name="late" content="1"/>'
            '<macro name="early" content="2"/>'
            '<macro name="late" content="3"/>'
            '<macro name="early" content="4"/>'
            "</document>"
        )
        transformation.transform(root)
        assert [(name, content) for name, content, _ in log] == [
            ("early", "2"),
            ("early", "4"),
            ("late", "1"),
            ("late", "3"),
        ]

    def test_output_becomes_children(self):
        """Test that returned nodes replace the marker's children."""
        transformation = MacroTransformation(macros=[RecordingMacro("hello", [], output="hi")])
        root = build('<document><macro name="hello"><word>old</word></macro></document>')
        result = transformation.transform(root)
        assert result.executed == 1
        assert [c.text for c in root[0]] == ["hi"]
        assert root[0].get("status") == "executed"

    def test_unknown_macro(self):
        """Test that unknown macros are reported and left in place."""
        root = build('<document><macro name="mystery"/></document>')
        result = MacroTransformation().transform(root)
        assert result.unknown == ["mystery"]
        assert result.executed == 0
        assert root[0].get("status") == "unknown"

    def test_failing_macro_does_not_abort(self):
        """Test that a failing macro is reported and others still run."""
        log = []
        transformation = MacroTransformation(macros=[FailingMacro(), RecordingMacro("ok", log)])
        root = build('<document><macro name="broken"/><macro name="ok"/></document>')
        result = transformation.transform(root)
        assert len(result.failures) == 1
        assert "nope" in result.failures[0].message
        assert root[0].get("status") == "failed"
        assert len(log) == 1

    def test_block_macro_used_inline_fails(self):
        """Test that block-only macros cannot run inline."""
        log = []
        transformation = MacroTransformation(macros=[RecordingMacro("block", log, inline=False)])
        root = build('<document><macro name="block" inline="true"/></document>')
        result = transformation.transform(root)
        assert log == []
        assert "inline mode" in result.failures[0].message

    def test_parameters_from_attributes(self):
        """Test extra marker attributes are passed as parameters."""
        log = []
        transformation = MacroTransformation(macros=[RecordingMacro("p", log)])
        root = build('<document><macro name="p" inline="false" style="x"/></document>')
        transformation.transform(root)
        assert log[0][2] == {"style": "x"}

    def test_macros_added_during_execution_run(self):
        """Test that markers appended by a macro are executed too."""

        class Appender(Macro):
            id = "appender"
            descriptor = MacroDescriptor(name="Appender", description="Appends a macro.")

            def execute(self, parameters, content, context):
                etree.SubElement(context.xdom, "macro", name="hello")
                return []

        log = []
        transformation = MacroTransformation(macros=[Appender(), RecordingMacro("hello", log)])
        transformation.transform(build('<document><macro name="appender"/></document>'))
        assert len(log) == 1

    def test_execution_limit(self):
        """Test that the execution limit stops macros that keep adding macros."""

        class Spawner(Macro):
            id = "spawner"
            descriptor = MacroDescriptor(name="Spawner", description="Spawns itself.")

            def execute(self, parameters, content, context):
                etree.SubElement(context.xdom, "macro", name="spawner")
                return []

        transformation = MacroTransformation(
            macros=[Spawner()], settings=ReferencesSettings(max_executions=5)
        )
        result = transformation.transform(build('<document><macro name="spawner"/></document>'))
        assert result.truncated is True
        # The authored marker plus five added ones
        assert result.executed == 6

    def test_authored_markers_ignore_limit(self):
        """Test that markers present before the run are never cut off."""
        log = []
        transformation = MacroTransformation(
            macros=[RecordingMacro("hello", log)], settings=ReferencesSettings(max_executions=2)
        )
        root = build("<document>" + '<macro name="hello"/>' * 5 + "</document>")
        result = transformation.transform(root)
        assert result.truncated is False
        assert result.executed == 5
        assert len(log) == 5

    def test_register_replaces_macro(self):
        """Test registering a macro with an existing id replaces it."""
        transformation = default_transformation()
        assert transformation.macro_names == ["reference", "references"]
        replacement = RecordingMacro("reference", [])
        transformation.register(replacement)
        assert transformation.get_macro("reference") is replacement


class TestReferenceTransformation:
    """End-to-end tests of the reference macros in a transformation."""

    def test_collection_point_added_and_rendered(self):
        """Test a document without markers gets a list at its end."""
        root = build(
            "<document>"
            '<paragraph><word>One</word><macro name="reference" inline="true" content="A"/>'
            "</paragraph>"
            '<paragraph><word>Two</word><macro name="reference" inline="true" content="A"/>'
            "</paragraph>"
            "</document>"
        )
        result = default_transformation().transform(root)

        assert result.failures == []
        assert root[-1].tag == "numberedlist"
        assert len(root[-1]) == 1
        occurrences = root.findall(".//macro[@name='reference']")
        assert [get_text(o) for o in occurrences] == ["1", "1"]
        assert [o[0].get("id") for o in occurrences] == [
            "x_reference_pre_1a",
            "x_reference_pre_1b",
        ]

    def test_author_placed_collection_point(self):
        """Test the list renders at the author's marker, not at the end."""
        root = build(
            "<document>"
            '<paragraph><macro name="reference" inline="true" content="A"/></paragraph>'
            '<macro name="references"/>'
            "<paragraph><word>Appendix</word></paragraph>"
            "</document>"
        )
        default_transformation().transform(root)
        assert root[1].tag == "numberedlist"
        assert root[2].tag == "paragraph"
        assert find_all(root, is_references) == []

    def test_two_collection_points(self):
        """Test only the first of two markers renders the list."""
        root = build(
            "<document>"
            '<macro name="references"/>'
            '<paragraph><macro name="reference" inline="true" content="A"/></paragraph>'
            '<macro name="references"/>'
            "</document>"
        )
        default_transformation().transform(root)
        assert [child.tag for child in root] == ["numberedlist", "paragraph"]

    def test_no_references_leaves_marker(self):
        """Test a marker without occurrences renders nothing."""
        root = build('<document><macro name="references"/></document>')
        result = default_transformation().transform(root)
        assert result.executed == 1
        assert root.findall(".//numberedlist") == []
        assert root[0].get("status") == "executed"
        assert len(root[0]) == 0

    def test_many_occurrences_render_one_list(self):
        """Test a document with more occurrences than max_executions still renders."""
        count = 1200
        markers = "".join(
            f'<macro name="reference" inline="true" content="note {i}"/>' for i in range(count)
        )
        root = build(f"<document><paragraph>{markers}</paragraph></document>")

        result = default_transformation().transform(root)

        assert result.truncated is False
        assert result.failures == []
        lists = root.findall(".//numberedlist")
        assert len(lists) == 1
        assert len(lists[0]) == count
        occurrences = root.findall(".//macro[@name='reference']")
        assert get_text(occurrences[-1]) == str(count)

    def test_parser_errors_fall_back_to_literal_body(self):
        """Test a parser raising an arbitrary exception does not abort the run."""

        class BrokenParser:
            def parse(self, content, context=None, inline=True, trim_leading=False):
                raise ValueError("boom")

        root = build(
            "<document><paragraph>"
            '<macro name="reference" inline="true" content="C"/>'
            "</paragraph></document>"
        )
        result = default_transformation(parser=BrokenParser()).transform(root)

        assert result.failures == []
        items = root.findall(".//listitem")
        assert len(items) == 1
        assert items[0][-1].tag == "word"
        assert items[0][-1].text == "C"

    def test_inline_collection_point_fails(self):
        """Test an inline references marker is reported, not rendered."""
        root = build(
            "<document><paragraph>"
            '<macro name="reference" inline="true" content="A"/>'
            '<macro name="references" inline="true"/>'
            "</paragraph></document>"
        )
        result = default_transformation().transform(root)
        assert len(result.failures) == 1
        assert result.failures[0].macro_name == "references"
        assert root.findall(".//numberedlist") == []
