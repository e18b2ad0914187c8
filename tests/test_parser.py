"""Tests for the diagram code parser."""

import pytest

from flowzap.errors import ParseError
from flowzap.graph_components import (
    LaneType,
    NodeKind,
    Shape,
    escape_label,
    match_line,
    parse,
)
from flowzap.graph_components.parser import (
    EdgeDeclaration,
    LaneClose,
    LaneOpen,
    NodeDeclaration,
    Skipped,
)


class TestConcreteScenario:
    """The single-lane start/validate diagram."""

    def test_lane(self, sales_code: str) -> None:
        """One lane with its inline display label."""
        graph = parse(sales_code)
        assert len(graph.lanes) == 1
        assert graph.lanes[0].id == "sales"
        assert graph.lanes[0].label == "Sales"

    def test_nodes(self, sales_code: str) -> None:
        """Circle is a start node, rectangle is a step."""
        graph = parse(sales_code)
        first, second = graph.nodes
        assert (first.id, first.kind, first.shape) == ("n1", NodeKind.START, Shape.CIRCLE)
        assert (second.id, second.kind, second.shape) == ("n2", NodeKind.STEP, Shape.RECTANGLE)
        assert first.lane_id == second.lane_id == "sales"

    def test_edge(self, sales_code: str) -> None:
        """Edge endpoints, handles and missing label."""
        edge = parse(sales_code).edges[0]
        assert edge.id == "e1"
        assert (edge.source, edge.target) == ("n1", "n2")
        assert (edge.source_handle, edge.target_handle) == ("right", "left")
        assert edge.label is None

    def test_stats(self, sales_code: str) -> None:
        """Aggregate counts."""
        assert parse(sales_code).stats.to_dict() == {
            "laneCount": 1,
            "nodeCount": 2,
            "edgeCount": 1,
            "crossLaneEdges": 0,
        }

    def test_to_dict(self, sales_code: str) -> None:
        """Wire form uses camelCase keys and omits unset optionals."""
        payload = parse(sales_code).to_dict()
        assert payload["lanes"] == [{"id": "sales", "label": "Sales", "type": "unknown"}]
        assert payload["nodes"][0] == {
            "id": "n1",
            "laneId": "sales",
            "label": "Start",
            "kind": "start",
            "shape": "circle",
        }
        assert payload["edges"][0] == {
            "id": "e1",
            "from": "n1",
            "to": "n2",
            "sourceHandle": "right",
            "targetHandle": "left",
            "fromLane": "sales",
            "toLane": "sales",
        }


class TestMultiLaneDiagram:
    """The documented order-processing example."""

    def test_lane_labels_from_comment_line(self, order_code: str) -> None:
        """A comment right after the lane opening becomes the label."""
        graph = parse(order_code)
        assert [(lane.id, lane.label) for lane in graph.lanes] == [
            ("sales", "Sales Team"),
            ("fulfillment", "Fulfillment"),
        ]

    def test_counts(self, order_code: str) -> None:
        """Six nodes, five edges, one cross-lane edge."""
        stats = parse(order_code).stats
        assert (stats.lane_count, stats.node_count, stats.edge_count) == (2, 6, 5)
        assert stats.cross_lane_edges == 1

    def test_kinds(self, order_code: str) -> None:
        """Kinds follow shape and label keywords."""
        kinds = {node.id: node.kind for node in parse(order_code).nodes}
        assert kinds == {
            "n1": NodeKind.START,
            "n2": NodeKind.STEP,
            "n3": NodeKind.DECISION,
            "n6": NodeKind.STEP,
            "n4": NodeKind.STEP,
            "n5": NodeKind.END,
        }

    def test_prefixed_target_lane(self, order_code: str) -> None:
        """A lane prefix on the target names its lane."""
        edge = parse(order_code).edges[2]
        assert (edge.source, edge.target, edge.label) == ("n3", "n4", "Yes")
        assert (edge.source_lane, edge.target_lane) == ("sales", "fulfillment")
        assert edge.is_cross_lane

    def test_forward_reference_has_no_lane(self, order_code: str) -> None:
        """A target declared later in the text has no resolved lane yet."""
        edge = parse(order_code).edges[3]
        assert edge.target == "n6"
        assert edge.source_lane == "sales"
        assert edge.target_lane is None
        assert not edge.is_cross_lane

    def test_edge_ids_are_sequential(self, order_code: str) -> None:
        """Edge ids follow textual order across lanes."""
        assert [edge.id for edge in parse(order_code).edges] == ["e1", "e2", "e3", "e4", "e5"]


class TestCrossLaneDetection:
    """Cross-lane edge statistics."""

    def test_single_cross_lane_edge(self) -> None:
        """Prefixed target in another lane counts once."""
        code = "A {\nn1: circle\n}\nB {\nn2: rectangle\n}\nn1.handle(right) -> B.n2.handle(left)"
        graph = parse(code)
        assert graph.stats.cross_lane_edges == 1
        edge = graph.edges[0]
        assert (edge.source_lane, edge.target_lane) == ("A", "B")
        assert graph.cross_lane_edges() == [edge]

    def test_lookup_resolves_both_sides(self) -> None:
        """Bare references use the lane each node was declared in."""
        code = "A {\nn1: circle\n}\nB {\nn2: rectangle\nn1.handle(bottom) -> n2.handle(top)\n}"
        edge = parse(code).edges[0]
        assert (edge.source_lane, edge.target_lane) == ("A", "B")


class TestLanes:
    """Lane opening and closing."""

    def test_reopened_lane_is_reused(self) -> None:
        """A second block with the same id does not create a new lane or relabel it."""
        code = "a {\nn1: circle\n}\na { # Other\nn2: rectangle\n}"
        graph = parse(code)
        assert len(graph.lanes) == 1
        assert graph.lanes[0].label == "a"
        assert [node.lane_id for node in graph.nodes] == ["a", "a"]

    def test_node_outside_lane_uses_default(self) -> None:
        """Nodes declared outside any block go to the default lane."""
        graph = parse("n1: circle\nx {\n}\nn2: rectangle")
        assert [node.lane_id for node in graph.nodes] == ["default", "default"]

    def test_close_always_returns_to_top_level(self) -> None:
        """Braces do not nest."""
        graph = parse("a {\nb {\n}\nn1: circle\n}")
        assert graph.nodes[0].lane_id == "default"

    @pytest.mark.parametrize(
        "lane_id, label, expected",
        [
            ("customer", "Customer", LaneType.ACTOR),
            ("db", "Database", LaneType.SYSTEM),
            ("sales", "Sales", LaneType.UNKNOWN),
        ],
    )
    def test_lane_type(self, lane_id: str, label: str, expected: LaneType) -> None:
        """Lane type is inferred from id and label."""
        lane = parse(f"{lane_id} {{ # {label}\n}}").lanes[0]
        assert lane.type is expected


class TestNodes:
    """Node declaration lines."""

    def test_equals_attributes_are_accepted(self) -> None:
        """Both key:"v" and key="v" are read."""
        assert parse('n1: rectangle label="Eq"').nodes[0].label == "Eq"

    def test_label_falls_back_to_description_then_id(self) -> None:
        """Missing label uses description, then the id."""
        graph = parse('n1: rectangle description:"Desc"\nn2: rectangle')
        assert [node.label for node in graph.nodes] == ["Desc", "n2"]

    def test_taskbox_properties(self) -> None:
        """Taskbox nodes carry owner, description and system."""
        node = parse('n4: taskbox owner:"Alice" description:"Deploy" system:"CI"').nodes[0]
        assert node.kind is NodeKind.TASK
        assert node.label == "Deploy"
        assert node.properties == {"owner": "Alice", "description": "Deploy", "system": "CI"}
        assert node.to_dict()["properties"]["owner"] == "Alice"

    def test_non_taskbox_has_no_properties(self) -> None:
        """Only taskbox nodes get a properties mapping."""
        node = parse('n1: rectangle owner:"Alice"').nodes[0]
        assert node.properties is None
        assert "properties" not in node.to_dict()

    @pytest.mark.parametrize(
        "line",
        [
            'n1: hexagon label:"Nope"',
            'n1: circles label:"Nope"',
            'n1: rectangle label:"a -> b"',
        ],
    )
    def test_rejected_node_lines(self, line: str) -> None:
        """Unknown shapes and lines containing an arrow are not nodes."""
        assert parse(line).nodes == []

    def test_circle_end_keyword(self) -> None:
        """Circles labelled with an end keyword are end nodes."""
        assert parse('n9: circle label:"Finished"').nodes[0].kind is NodeKind.END

    def test_duplicate_ids_are_kept(self) -> None:
        """Repeated ids add entries; lookups resolve to the last one."""
        graph = parse('a {\nn1: circle label:"First"\n}\nb {\nn1: rectangle label:"Second"\n}')
        assert len(graph.nodes) == 2
        assert graph.get_node("n1").label == "Second"


class TestEdges:
    """Edge declaration lines."""

    def test_handles_are_lower_cased(self) -> None:
        """Directions are stored lower-case."""
        edge = parse("n1.handle(RIGHT) -> n2.handle(Left)").edges[0]
        assert (edge.source_handle, edge.target_handle) == ("right", "left")

    def test_colon_label_is_accepted(self) -> None:
        """Edge labels may use a colon."""
        assert parse('n1.handle(right) -> n2.handle(left) [label:"ok"]').edges[0].label == "ok"

    def test_lane_uses_most_recent_declaration(self) -> None:
        """Lookup follows the latest declaration of the node id."""
        code = "a {\nn1: circle\n}\nb {\nn1: circle\n}\nn1.handle(right) -> n2.handle(left)"
        assert parse(code).edges[0].source_lane == "b"


class TestTolerance:
    """Best-effort parsing."""

    def test_garbage_lines_are_skipped(self, sales_code: str) -> None:
        """Unrecognised lines do not affect the result."""
        noisy = sales_code.replace("n2: rectangle", "this is not code\nloop [retry] n1 n2\nn2: rectangle")
        assert parse(noisy) == parse(sales_code)

    def test_empty_text(self) -> None:
        """Empty input yields an empty graph."""
        graph = parse("")
        assert graph.lanes == [] and graph.nodes == [] and graph.edges == []
        assert graph.stats.node_count == 0

    def test_crlf_line_endings(self, sales_code: str) -> None:
        """Windows line endings parse the same."""
        assert parse(sales_code.replace("\n", "\r\n")) == parse(sales_code)

    def test_parse_is_deterministic(self, order_code: str) -> None:
        """Repeated parses are identical."""
        assert parse(order_code) == parse(order_code)
        assert parse(order_code).to_dict() == parse(order_code).to_dict()


class TestStrictMode:
    """Opt-in strict parsing."""

    def test_unrecognised_line_raises(self, sales_code: str) -> None:
        """The offending line number is reported."""
        code = sales_code.replace("n2: rectangle", "garbage here\nn2: rectangle")
        with pytest.raises(ParseError) as excinfo:
            parse(code, strict=True)
        assert excinfo.value.line_number == 3
        assert excinfo.value.line == "garbage here"

    def test_comments_and_loops_are_allowed(self, order_code: str) -> None:
        """Comments and loop declarations are valid lines."""
        code = order_code.replace("}\n\nfulfillment", "loop [retry] n1 n2\n}\n\nfulfillment", 1)
        assert parse(code, strict=True).stats.node_count == 6


class TestEscaping:
    """Quoted values and escape sequences."""

    def test_escape_label(self) -> None:
        """Backslashes then quotes are escaped."""
        assert escape_label(r'He said "hi"\now') == r'He said \"hi\"\\now'

    def test_newlines_collapse_and_trim(self) -> None:
        """Newlines become spaces and the value is trimmed."""
        assert escape_label("  two\nlines ") == "two lines"

    def test_round_trip(self) -> None:
        """Escaped text parses back to the original value."""
        original = r'He said "hi"\now'
        node = parse(f'n1: rectangle label:"{escape_label(original)}"').nodes[0]
        assert node.label == original


class TestMatchLine:
    """Per-line classification."""

    @pytest.mark.parametrize(
        "line, expected_type",
        [
            ("sales { # Sales", LaneOpen),
            ("}", LaneClose),
            ('n1: circle label:"Start"', NodeDeclaration),
            ("n1.handle(right) -> n2.handle(left)", EdgeDeclaration),
            ("# just a comment", Skipped),
            ("whatever", Skipped),
        ],
    )
    def test_line_types(self, line: str, expected_type: type) -> None:
        """Each line maps to one result type."""
        assert isinstance(match_line(line), expected_type)

    def test_skip_reasons(self) -> None:
        """Skipped lines say why."""
        assert match_line("# note").reason == "comment"
        assert match_line("loop [x] n1 n2").reason == "loop"
        assert match_line("???").reason == "unrecognized"


class TestClassifierInjection:
    """Swappable heuristics."""

    def test_custom_classifiers(self, sales_code: str) -> None:
        """Injected classifiers replace the keyword heuristics."""
        graph = parse(
            sales_code,
            lane_classifier=lambda lane_id, label: LaneType.ACTOR,
            node_classifier=lambda shape, label: NodeKind.TASK,
        )
        assert graph.lanes[0].type is LaneType.ACTOR
        assert {node.kind for node in graph.nodes} == {NodeKind.TASK}
