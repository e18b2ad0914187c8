"""Shared diagram fixtures for the test suite."""

import pytest

SALES_CODE = """sales { # Sales
n1: circle label:"Start"
n2: rectangle label:"Validate"
n1.handle(right) -> n2.handle(left)
}"""

ORDER_CODE = """sales {
  # Sales Team
  n1: circle label:"Order Received"
  n2: rectangle label:"Validate Order"
  n3: diamond label:"Valid?"
  n1.handle(right) -> n2.handle(left)
  n2.handle(right) -> n3.handle(left)
  n3.handle(right) -> fulfillment.n4.handle(left) [label="Yes"]
  n3.handle(bottom) -> n6.handle(top) [label="No"]
  n6: rectangle label:"Reject Order"
}

fulfillment {
  # Fulfillment
  n4: rectangle label:"Process Order"
  n5: circle label:"Complete"
  n4.handle(right) -> n5.handle(left)
}
"""

PATCH_BASE = """sales { # Sales
  n1: circle label:"Start"
  n2: rectangle label:"Validate"
  n1.handle(right) -> n2.handle(left)
}

ops { # Operations
  n3: rectangle label:"Ship"
}"""


@pytest.fixture
def sales_code() -> str:
    return SALES_CODE


@pytest.fixture
def order_code() -> str:
    return ORDER_CODE


@pytest.fixture
def patch_base() -> str:
    return PATCH_BASE
