"""Unit tests for source cleaning, validation and contract name discovery."""

import pytest

from SmDeployments.exceptions import AmbiguousContractName, ContractNotFound, InvalidSourceFormat
from SmDeployments.preprocess import (
    RegexContractNameExtractor,
    SourcePreprocessor,
    clean_source,
    validate_source,
)


class TestCleanSource:
    """Test the clean_source function."""

    def test_strips_language_prefix(self):
        assert clean_source("solidity\npragma solidity ^0.8.0;") == "pragma solidity ^0.8.0;"

    def test_strips_language_prefix_case_insensitive(self):
        assert clean_source("Solidity // c").startswith("// c")
        assert clean_source("JAVASCRIPT// c") == "// c"

    def test_normalizes_line_endings(self):
        cleaned = clean_source("// a\r\n// b\r// c")
        assert "\r" not in cleaned
        assert cleaned == "// a\n// b\n// c"

    def test_strips_leading_blank_lines_and_whitespace(self):
        assert clean_source("\n\n   \n  pragma solidity ^0.8.0;  \n\n") == "pragma solidity ^0.8.0;"


class TestValidateSource:
    """Test accepted and rejected source prefixes."""

    @pytest.mark.parametrize(
        "source",
        [
            "// SPDX-License-Identifier: MIT\ncontract A {}",
            "// plain comment\ncontract A {}",
            "/* block */ contract A {}",
            "pragma solidity ^0.8.0; contract A {}",
            "PRAGMA   SOLIDITY >=0.7.0;",
        ],
    )
    def test_accepts_valid_starts(self, source):
        validate_source(source)

    def test_rejects_code_without_header(self):
        with pytest.raises(InvalidSourceFormat) as excinfo:
            validate_source("contract A { }")
        assert excinfo.value.prefix == "contract A { }"

    def test_prefix_is_truncated(self):
        source = "x" * 200
        with pytest.raises(InvalidSourceFormat) as excinfo:
            validate_source(source)
        assert excinfo.value.prefix == "x" * 50

    def test_rejects_empty_source(self):
        with pytest.raises(InvalidSourceFormat):
            validate_source("")


class TestRegexContractNameExtractor:
    """Test deterministic name extraction."""

    def setup_method(self):
        self.extractor = RegexContractNameExtractor()

    def test_single_contract(self, demo_source):
        assert self.extractor.extractName(demo_source) == "Demo"

    def test_contract_with_inheritance(self):
        source = "pragma solidity ^0.8.0;\ninterface IFoo {}\ncontract Token is IFoo, Other {\n}"
        assert self.extractor.extractName(source) == "Token"

    def test_abstract_contracts_are_skipped(self):
        source = "// x\nabstract contract Base {}\ncontract Impl is Base {}"
        assert self.extractor.extractName(source) == "Impl"

    def test_commented_declarations_are_ignored(self):
        source = "// contract Old {\n/* contract Older { */\ncontract Current {}"
        assert self.extractor.extractName(source) == "Current"

    def test_no_contract_raises(self):
        with pytest.raises(ContractNotFound) as excinfo:
            self.extractor.extractName("pragma solidity ^0.8.0;\ninterface IFoo {}")
        assert not isinstance(excinfo.value, AmbiguousContractName)
        assert excinfo.value.available == []

    def test_multiple_contracts_raise_ambiguity(self):
        source = "// x\ncontract A {}\ncontract B {}"
        with pytest.raises(AmbiguousContractName) as excinfo:
            self.extractor.extractName(source)
        assert excinfo.value.available == ["A", "B"]

    def test_repeated_name_is_not_ambiguous(self):
        source = "// x\ncontract A {}\n// contract A {\ncontract A {}"
        assert self.extractor.extractName(source) == "A"

    def test_extraction_is_deterministic(self):
        source = "// x\ncontract B {}\ncontract A {}"
        results = set()
        for _ in range(5):
            with pytest.raises(AmbiguousContractName) as excinfo:
                self.extractor.extractName(source)
            results.add(tuple(excinfo.value.available))
        assert results == {("B", "A")}


class TestSourcePreprocessor:
    """Test the combined prepare step."""

    def test_prepare_returns_document(self, demo_source):
        document = SourcePreprocessor().prepare("solidity\r\n\r\n" + demo_source)
        assert document.contract_name == "Demo"
        assert document.file_name == "Demo.sol"
        assert document.content == demo_source

    def test_explicit_name_skips_extraction(self):
        source = "// x\ncontract A {}\ncontract B {}"
        document = SourcePreprocessor().prepare(source, "B")
        assert document.contract_name == "B"

    def test_custom_extractor_is_used(self, demo_source):
        class Fixed(RegexContractNameExtractor):
            def extractName(self, source):
                return "Fixed"

        assert SourcePreprocessor(Fixed()).prepare(demo_source).contract_name == "Fixed"

    def test_invalid_source_fails_before_extraction(self):
        with pytest.raises(InvalidSourceFormat):
            SourcePreprocessor().prepare("contract A {}")
