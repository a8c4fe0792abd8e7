# preprocess.py
# clean editor-pasted Solidity source and discover the contract to deploy
import os
import re
from typing import List, Optional

import sd_config as Config
from DataBean.data_bean import SourceDocument
from SmDeployments.exceptions import (
    AmbiguousContractName,
    ContractNotFound,
    InvalidSourceFormat,
)

logger = Config.get_logger(os.path.splitext(os.path.basename(__file__))[0])

# editors may prepend the language id of the code block
LANGUAGE_PREFIX_RE = re.compile(r"^(solidity|javascript)\s*", re.IGNORECASE)
LEADING_BLANK_LINES_RE = re.compile(r"^\s*\n+")

VALID_STARTS = [
    re.compile(r"^\s*//\s*SPDX-License-Identifier", re.IGNORECASE),
    re.compile(r"^\s*//"),
    re.compile(r"^\s*/\*"),
    re.compile(r"^\s*pragma\s+solidity", re.IGNORECASE),
]

LINE_COMMENT_RE = re.compile(r"//[^\n]*")
BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
CONTRACT_DECL_RE = re.compile(
    r"(?P<abstract>\babstract\s+)?\bcontract\s+(?P<name>\w+)(?:\s+is\s+[^{;]+?)?\s*\{"
)


def clean_source(raw: str) -> str:
    cleaned = LANGUAGE_PREFIX_RE.sub("", raw, count=1)
    cleaned = cleaned.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = LEADING_BLANK_LINES_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def validate_source(cleaned: str) -> None:
    if not cleaned:
        raise InvalidSourceFormat("No source code provided after cleaning", prefix="")
    if not any(pattern.match(cleaned) for pattern in VALID_STARTS):
        prefix = cleaned[:50]
        logger.error(f"  ✖ invalid code start: {prefix!r}")
        raise InvalidSourceFormat(
            "Source code must start with SPDX license, comment, or pragma statement "
            f"(begins with {prefix!r})",
            prefix=prefix,
        )


class ContractNameExtractor:
    """Finds the single contract a source declares."""

    def extractName(self, source: str) -> str:
        raise NotImplementedError


class RegexContractNameExtractor(ContractNameExtractor):
    """
    Heuristic extractor matching `contract <Name> [is ...] {` outside comments.

    Abstract contracts are skipped since they cannot be deployed. Interfaces
    and libraries never match.
    """

    def candidates(self, source: str) -> List[str]:
        stripped = BLOCK_COMMENT_RE.sub(" ", source)
        stripped = LINE_COMMENT_RE.sub(" ", stripped)
        names = []
        for match in CONTRACT_DECL_RE.finditer(stripped):
            if match.group("abstract"):
                continue
            name = match.group("name")
            if name not in names:
                names.append(name)
        return names

    def extractName(self, source: str) -> str:
        names = self.candidates(source)
        if not names:
            raise ContractNotFound("Failed to extract contract name from code", available=[])
        if len(names) > 1:
            raise AmbiguousContractName(
                f"Source declares several contracts ({', '.join(names)}); "
                "pass the contract name explicitly",
                available=names,
            )
        return names[0]


class SourcePreprocessor:
    def __init__(self, extractor: Optional[ContractNameExtractor] = None):
        self.extractor = extractor or RegexContractNameExtractor()

    # clean + validate, then resolve the contract name if not given
    def prepare(self, raw: str, contract_name: Optional[str] = None) -> SourceDocument:
        cleaned = clean_source(raw or "")
        validate_source(cleaned)
        if contract_name is None:
            contract_name = self.extractor.extractName(cleaned)
        logger.info(f"  ✔ source accepted ({len(cleaned)} chars), contract {contract_name}")
        return SourceDocument(content=cleaned, contract_name=contract_name)
