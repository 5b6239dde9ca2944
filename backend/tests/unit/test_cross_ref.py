"""
上下文交叉校验器单元测试
"""

import pytest

from plan_annotator.analysis import ContextCrossReferenceValidator
from plan_annotator.models import (
    ContextDocument,
    DiagnosticCode,
    ElementRecord,
    InventoryRow,
    PanelControlInterface,
    SemanticModel,
    Severity,
)


@pytest.fixture
def validator(convention) -> ContextCrossReferenceValidator:
    return ContextCrossReferenceValidator(convention)


def _codes(diagnostics) -> list[str]:
    return [d.code for d in diagnostics]


def _without_row(doc: ContextDocument, element_id: str) -> ContextDocument:
    return doc.model_copy(update={
        "inventory": tuple(r for r in doc.inventory if r.id != element_id),
    })


class TestCleanPair:
    """一致文档测试"""

    def test_no_diagnostics(self, validator, sample_model, sample_document):
        """测试完全一致的 SVG + markdown"""
        assert validator.validate(sample_model, sample_document) == []

    def test_only_warnings_and_info(self, validator, sample_model):
        """测试交叉校验不产生错误"""
        diagnostics = validator.validate(sample_model, ContextDocument())
        assert diagnostics
        assert all(d.severity is not Severity.ERROR for d in diagnostics)


class TestInventory:
    """元素清单对照测试"""

    def test_orphan_documented_element(self, validator, sample_model, sample_document):
        """测试清单中的 id 不在 SVG 中"""
        doc = sample_document.model_copy(update={
            "inventory": sample_document.inventory + (InventoryRow(id="panel-9"),),
        })
        diagnostics = validator.validate(sample_model, doc)
        assert _codes(diagnostics) == [DiagnosticCode.ORPHAN_DOCUMENTED_ELEMENT.value]
        assert diagnostics[0].element_ids == ("panel-9",)

    def test_undocumented_element(self, validator, sample_model, sample_document):
        """测试已标注元素不在清单中"""
        diagnostics = validator.validate(sample_model, _without_row(sample_document, "sensor-1"))
        assert _codes(diagnostics) == [DiagnosticCode.UNDOCUMENTED_ELEMENT.value]
        assert diagnostics[0].element_ids == ("sensor-1",)

    def test_empty_inventory_skips_reverse_check(self, validator, sample_model, sample_document):
        """测试清单为空时不做反向检查"""
        doc = sample_document.model_copy(update={"inventory": ()})
        assert validator.validate(sample_model, doc) == []

    def test_inventory_mismatch(self, validator, sample_model, sample_document):
        """测试清单行与 SVG 不一致"""
        rows = tuple(
            r.model_copy(update={"address": "5", "data_type": "Sensor"}) if r.id == "panel-2" else r
            for r in sample_document.inventory
        )
        doc = sample_document.model_copy(update={"inventory": rows})
        diagnostics = validator.validate(sample_model, doc)
        assert _codes(diagnostics) == [DiagnosticCode.INVENTORY_MISMATCH.value]
        assert "address '5'" in diagnostics[0].message
        assert "data-type 'Sensor'" in diagnostics[0].message

    def test_type_compare_case_insensitive(self, validator, sample_model, sample_document):
        """测试类型比较大小写不敏感"""
        rows = tuple(
            r.model_copy(update={"data_type": "PANEL"}) if r.id == "panel-1" else r
            for r in sample_document.inventory
        )
        doc = sample_document.model_copy(update={"inventory": rows})
        assert validator.validate(sample_model, doc) == []


class TestDocumentation:
    """区域/类型/分组文档化测试"""

    def test_undocumented_zone(self, validator, sample_model, sample_document):
        """测试区域无文档条目"""
        doc = sample_document.model_copy(update={"zones": {}})
        diagnostics = validator.validate(sample_model, doc)
        assert _codes(diagnostics) == [DiagnosticCode.UNDOCUMENTED_ZONE.value]
        assert diagnostics[0].element_ids == ("zone-1",)

    def test_undocumented_type(self, validator, sample_model, sample_document):
        """测试类型无文档小节（列出示例元素）"""
        types = {k: v for k, v in sample_document.element_types.items() if k != "panel"}
        doc = sample_document.model_copy(update={"element_types": types})
        diagnostics = validator.validate(sample_model, doc)
        assert _codes(diagnostics) == [DiagnosticCode.UNDOCUMENTED_TYPE.value]
        assert diagnostics[0].element_ids == ("panel-1", "panel-2")

    def test_undocumented_group(self, validator, sample_model, sample_document):
        """测试声明分组无文档条目"""
        doc = sample_document.model_copy(update={"groups": {}})
        diagnostics = validator.validate(sample_model, doc)
        assert _codes(diagnostics) == [DiagnosticCode.UNDOCUMENTED_GROUP.value]

    def test_implicit_group_not_required(self, validator, sample_document):
        """测试隐式分组无需文档条目"""
        model = SemanticModel(elements=(ElementRecord(id="p", tag_name="rect", group="night-mode"),))
        doc = sample_document.model_copy(update={"inventory": ()})
        assert _codes(validator.validate(model, doc)) == []


class TestScale:
    """比例复核测试"""

    def test_scale_mismatch(self, validator, sample_model, sample_document):
        """测试声明长度与比例不符"""
        doc = sample_document.model_copy(update={"scale_reference_length_m": 2.0})
        diagnostics = validator.validate(sample_model, doc)
        assert _codes(diagnostics) == [DiagnosticCode.SCALE_MISMATCH.value]
        assert diagnostics[0].element_ids == ("scale-ref",)

    def test_scale_within_tolerance(self, validator, sample_model, sample_document):
        """测试偏差在容差内"""
        doc = sample_document.model_copy(update={"scale_reference_length_m": 5.1})
        assert validator.validate(sample_model, doc) == []

    def test_custom_tolerance(self, convention, sample_model, sample_document):
        """测试自定义容差"""
        strict = ContextCrossReferenceValidator(convention, scale_tolerance=0.001)
        doc = sample_document.model_copy(update={"scale_reference_length_m": 5.1})
        assert _codes(strict.validate(sample_model, doc)) == [DiagnosticCode.SCALE_MISMATCH.value]

    def test_no_declared_length(self, validator, sample_model, sample_document):
        """测试未声明长度时跳过"""
        doc = sample_document.model_copy(update={"scale_reference_length_m": None})
        assert validator.validate(sample_model, doc) == []


class TestInfo:
    """提示级诊断测试"""

    def test_unknown_protocol(self, validator, sample_model, sample_document):
        """测试未知协议透传为提示"""
        doc = sample_document.model_copy(update={
            "panel_control_interface": PanelControlInterface(protocol="KNX"),
        })
        diagnostics = validator.validate(sample_model, doc)
        assert _codes(diagnostics) == [DiagnosticCode.UNKNOWN_PROTOCOL.value]
        assert diagnostics[0].severity is Severity.INFO

    def test_missing_section(self, validator, sample_model, sample_document):
        """测试缺失章节"""
        present = tuple(k for k in sample_document.sections_present if k != "data_structures")
        doc = sample_document.model_copy(update={"sections_present": present})
        diagnostics = validator.validate(sample_model, doc)
        assert _codes(diagnostics) == [DiagnosticCode.MISSING_SECTION.value]
        assert "Data Structures" in diagnostics[0].message
