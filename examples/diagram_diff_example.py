"""Example demonstrating diff between two versions of diagram code."""

from flowzap import apply_changes, diff

BASE_CODE = """sales { # Sales
  n1: circle label:"Order Received"
  n2: rectangle label:"Validate Order"
  n1.handle(right) -> n2.handle(left)
}

fulfillment { # Fulfillment
  n3: rectangle label:"Ship"
}"""


def build_modified_code() -> str:
    result = apply_changes(
        BASE_CODE,
        [
            {"op": "updateNode", "nodeId": "n2", "updates": {"label": "Check Order"}},
            {
                "op": "insertNode",
                "laneId": "sales",
                "afterNodeId": "n2",
                "newNode": {"shape": "diamond", "label": "Valid?"},
            },
            {"op": "insertEdge", "newEdge": {"from": "n2", "to": "n4"}},
            {"op": "insertEdge", "newEdge": {"from": "n4", "to": "n3", "label": "Yes"}},
        ],
    )
    for entry in result.log:
        print(entry)
    return result.code


def main() -> None:
    modified = build_modified_code()
    print(modified)

    result = diff(BASE_CODE, modified)
    print("Summary:", result.summary)
    print("Added nodes:", [node.id for node in result.nodes_added])
    print("Updated nodes:", [update.id for update in result.nodes_updated])
    print("Added edges:", [(edge.source, edge.target) for edge in result.edges_added])


if __name__ == "__main__":
    main()
