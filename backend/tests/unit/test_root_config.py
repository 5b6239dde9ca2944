"""
根节点配置解析器单元测试
"""

import json

import pytest

from plan_annotator.interfaces import InvalidTransformError
from plan_annotator.models import DiagnosticCode
from plan_annotator.svg import RootConfigParser

GROUPS = json.dumps([
    {"id": "entrance", "name": "Entrance", "elements": ["panel-1", "panel-2"]},
    {"id": "exit", "elements": []},
])


@pytest.fixture
def parser(convention) -> RootConfigParser:
    return RootConfigParser(convention)


def _codes(result) -> list[str]:
    return [d.code for d in result.diagnostics]


class TestTransform:
    """坐标变换测试"""

    def test_full_transform(self, parser):
        """测试完整根属性"""
        result = parser.parse({
            "data-origin-x": "10",
            "data-origin-y": "500",
            "data-scale-px-per-meter": "100",
            "data-annotator-version": " 1.2 ",
            "data-groups": "[]",
        })
        t = result.transform
        assert (t.origin_x, t.origin_y, t.scale_px_per_meter) == (10, 500, 100)
        assert t.annotator_version == "1.2"
        assert result.diagnostics == ()

    def test_origin_defaults_to_zero(self, parser):
        """测试原点缺省为 0"""
        result = parser.parse({"data-scale-px-per-meter": "50", "data-groups": "[]"})
        assert (result.transform.origin_x, result.transform.origin_y) == (0, 0)

    def test_invalid_origin(self, parser):
        """测试原点非数值"""
        with pytest.raises(InvalidTransformError) as exc_info:
            parser.parse({"data-origin-x": "left"}, source="plan.svg")
        diagnostic = exc_info.value.to_diagnostic()
        assert diagnostic.code == DiagnosticCode.INVALID_ORIGIN.value
        assert diagnostic.source == "plan.svg"

    @pytest.mark.parametrize("value", ["0", "-5", "abc", "nan", "inf"])
    def test_invalid_scale(self, parser, value):
        """测试比例非法（零/负/非数值）"""
        with pytest.raises(InvalidTransformError) as exc_info:
            parser.parse({"data-scale-px-per-meter": value})
        assert exc_info.value.code == DiagnosticCode.INVALID_SCALE.value

    def test_missing_scale(self, parser):
        """测试比例缺失为警告"""
        result = parser.parse({"data-groups": "[]"})
        assert not result.transform.has_scale
        assert _codes(result) == [DiagnosticCode.MISSING_SCALE.value]

    def test_y_axis_setting(self, convention):
        """测试 y 轴方向配置透传"""
        result = RootConfigParser(convention, y_up=False).parse({"data-scale-px-per-meter": "1"})
        assert result.transform.y_up is False


class TestGroups:
    """分组解析测试"""

    def test_parse_groups(self, parser):
        """测试 JSON 分组"""
        result = parser.parse({"data-scale-px-per-meter": "1", "data-groups": GROUPS})
        assert [g.id for g in result.groups] == ["entrance", "exit"]
        assert result.groups[0].name == "Entrance"
        assert result.groups[0].elements == ("panel-1", "panel-2")
        assert result.groups[1].name == ""
        assert result.diagnostics == ()

    def test_missing_groups(self, parser):
        """测试分组缺失"""
        result = parser.parse({"data-scale-px-per-meter": "1"})
        assert result.groups == ()
        assert _codes(result) == [DiagnosticCode.MISSING_GROUPS.value]

    @pytest.mark.parametrize("raw", [
        "[{id: 'entrance'}]",
        '{"id": "entrance"}',
        '[{"name": "no id"}]',
        '[{"id": "entrance", "elements": "panel-1"}]',
        '[{"id": "a"}, {"id": "a"}]',
        '["entrance"]',
    ])
    def test_malformed_groups(self, parser, raw):
        """测试分组格式错误：整体丢弃并警告"""
        result = parser.parse({"data-scale-px-per-meter": "1", "data-groups": raw})
        assert result.groups == ()
        assert _codes(result) == [DiagnosticCode.MALFORMED_GROUPS.value]
