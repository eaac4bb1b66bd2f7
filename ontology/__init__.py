"""
SGoV オントロジーモジュール

ワークスペース語彙のIRIとSHACL用語集ルールを提供します。
"""

from pathlib import Path

ONTOLOGY_DIR = Path(__file__).parent
GLOSSARY_RULES_TTL = ONTOLOGY_DIR / "glossary_rules.ttl"

# 名前空間定義
SGOV_NS = "https://slovník.gov.cz/"
WORKSPACE_NS = "https://slovník.gov.cz/datový/pracovní-prostor/pojem/"

# クラス
WORKSPACE = f"{WORKSPACE_NS}pracovní-prostor"
VOCABULARY_CONTEXT = f"{WORKSPACE_NS}slovníkový-kontext"
VOCABULARY_CONTEXT_READONLY = f"{WORKSPACE_NS}slovníkový-kontext-pouze-pro-čtení"
CHANGE_TRACKING_CONTEXT = f"{WORKSPACE_NS}kontext-sledování-změn"
VOCABULARY = f"{WORKSPACE_NS}slovník"
GLOSSARY = f"{WORKSPACE_NS}glosář"
MODEL = f"{WORKSPACE_NS}model"

# プロパティ
REFERS_TO_VOCABULARY_CONTEXT = f"{WORKSPACE_NS}odkazuje-na-kontext"
BASED_ON_VOCABULARY_VERSION = f"{WORKSPACE_NS}vychází-z-verze"
HAS_CHANGE_TRACKING_CONTEXT = f"{WORKSPACE_NS}má-kontext-sledování-změn"
CHANGES_VOCABULARY_VERSION = f"{WORKSPACE_NS}mění-verzi"
HAS_GLOSSARY = f"{WORKSPACE_NS}má-glosář"
HAS_MODEL = f"{WORKSPACE_NS}má-model"
