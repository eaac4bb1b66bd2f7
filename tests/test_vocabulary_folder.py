"""語彙IRIからフォルダ構成への対応のテスト"""

import pytest

from pipeline.vocabulary_folder import VocabularyFolder, VocabularyInstance


# ---------------------------------------------------------------------------
# VocabularyInstance
# ---------------------------------------------------------------------------

class TestVocabularyInstance:
    def test_parses_legislative_vocabulary(self):
        instance = VocabularyInstance.parse("https://slovník.gov.cz/legislativní/sbírka/111/2009")
        assert instance.kind == "legislativní"
        assert instance.path == ("sbírka", "111", "2009")
        assert instance.folder_id == "l-sgov-sbírka-111-2009"

    def test_folder_prefix_follows_kind(self):
        assert VocabularyInstance.parse(
            "https://slovník.gov.cz/agendový/104"
        ).folder_id == "a-sgov-104"
        assert VocabularyInstance.parse(
            "https://slovník.gov.cz/veřejný-sektor/pojem-x"
        ).folder_id == "v-sgov-pojem-x"

    def test_trailing_slash_is_ignored(self):
        instance = VocabularyInstance.parse("https://slovník.gov.cz/datový/pracovní-prostor/")
        assert instance.folder_id == "d-sgov-pracovní-prostor"

    @pytest.mark.parametrize("iri", [
        "",
        "http://example.org/vocabulary",
        "https://slovník.gov.cz/neznámý/x",
        "https://slovník.gov.cz/legislativní",
        "https://slovník.gov.cz/legislativní//2009",
        "https://slovník.gov.cz/legislativní/sbírka 111",
    ])
    def test_rejects_malformed_iri(self, iri):
        with pytest.raises(ValueError):
            VocabularyInstance.parse(iri)


# ---------------------------------------------------------------------------
# VocabularyFolder
# ---------------------------------------------------------------------------

class TestVocabularyFolder:
    def _folder(self, tmp_path):
        instance = VocabularyInstance.parse("https://slovník.gov.cz/generický/číselníky")
        return VocabularyFolder.of_vocabulary_iri(tmp_path, instance)

    def test_creates_folder_under_vocabularies_dir(self, tmp_path):
        folder = self._folder(tmp_path)
        assert folder.folder.is_dir()
        assert folder.folder == tmp_path / "content" / "vocabularies" / "g-sgov-číselníky"

    def test_file_names(self, tmp_path):
        folder = self._folder(tmp_path)
        assert folder.compact_file.name == "g-sgov-číselníky.ttl"
        assert folder.vocabulary_file.name == "g-sgov-číselníky-slovník.ttl"
        assert folder.glossary_file.name == "g-sgov-číselníky-glosář.ttl"
        assert folder.model_file.name == "g-sgov-číselníky-model.ttl"

    def test_prune_keeps_only_compact_file(self, tmp_path):
        folder = self._folder(tmp_path)
        for path in (folder.compact_file, folder.glossary_file, folder.model_file):
            path.write_text("# content\n", encoding="utf-8")
        (folder.folder / "notes.md").write_text("stale", encoding="utf-8")
        (folder.folder / "subdir").mkdir()

        pruned = {p.name for p in folder.to_prune_all_except_compact()}

        assert pruned == {
            "g-sgov-číselníky-glosář.ttl",
            "g-sgov-číselníky-model.ttl",
            "notes.md",
        }

    def test_prune_of_empty_folder(self, tmp_path):
        assert self._folder(tmp_path).to_prune_all_except_compact() == []
