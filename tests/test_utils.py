"""Display and code helpers."""
from __future__ import annotations

import pytest

from wyrmhole.core.utils import display_name_for_paths, format_bytes, normalize_receive_code


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 B"), (512, "512 B"), (1536, "1.5 KB"), (204800, "200 KB"), (5 * 1024 ** 3, "5 GB")],
)
def test_format_bytes(size, expected) -> None:
    assert format_bytes(size) == expected


def test_display_name_priority() -> None:
    assert display_name_for_paths(["/a/report.pdf"]) == "report.pdf"
    assert display_name_for_paths(["C:\\docs\\report.pdf"]) == "report.pdf"
    assert display_name_for_paths(["a", "b", "c"]) == "3 files"
    assert display_name_for_paths(["a", "b"], folder_name="bundle") == "bundle"
    assert display_name_for_paths(["a", "b"], hint="Holiday", folder_name="bundle") == "Holiday"


def test_normalize_receive_code() -> None:
    assert normalize_receive_code("  7-wizard-castle\n") == "7-wizard-castle"
    assert normalize_receive_code("wormhole receive 7-wizard-castle") == "7-wizard-castle"
    assert normalize_receive_code("wormhole receive ") == ""
    assert normalize_receive_code("wormhole receive") == ""
    assert normalize_receive_code("  wormhole receive\t7-wizard-castle") == "7-wizard-castle"
    assert normalize_receive_code("wormholereceive 7-x") == "wormholereceive 7-x"
