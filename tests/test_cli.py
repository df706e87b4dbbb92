"""
Tests for the command-line interface and configuration.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

ENV_VARS = (
    "SCANCLEAN_MAX_WORKERS",
    "SCANCLEAN_CROP_TO_TEXT",
    "SCANCLEAN_OCR_LANG",
    "SCANCLEAN_GRAMMAR_LANG",
    "SCANCLEAN_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def parse(*argv):
    from scanclean.cli import setup_argparser
    return setup_argparser().parse_args(list(argv))


class TestConfig:
    """Test configuration defaults, validation and environment overrides."""

    def test_defaults(self):
        from scanclean.config import get_config

        config = get_config()

        assert config.edges.low_threshold == 50.0
        assert config.edges.high_threshold == 100.0
        assert config.edges.min_edge_count == 50_000
        assert config.clusters.eps == 10.0
        assert config.clusters.min_points == 5
        assert config.clusters.crop_to_text is False
        assert config.correction.enabled is True
        assert config.max_workers is None

    def test_env_overrides(self, monkeypatch):
        from scanclean.config import get_config

        monkeypatch.setenv("SCANCLEAN_MAX_WORKERS", "3")
        monkeypatch.setenv("SCANCLEAN_CROP_TO_TEXT", "true")
        monkeypatch.setenv("SCANCLEAN_OCR_LANG", "deu")
        monkeypatch.setenv("SCANCLEAN_GRAMMAR_LANG", "de")
        monkeypatch.setenv("SCANCLEAN_DEBUG", "True")

        config = get_config()

        assert config.max_workers == 3
        assert config.clusters.crop_to_text is True
        assert config.ocr.language == "deu"
        assert config.correction.language == "de"
        assert config.debug_mode is True

    def test_invalid_env_workers(self, monkeypatch):
        from scanclean.config import get_config

        monkeypatch.setenv("SCANCLEAN_MAX_WORKERS", "0")
        with pytest.raises(ValueError):
            get_config()

    @pytest.mark.parametrize("factory", [
        lambda c: c.EdgeConfig(low_threshold=100.0, high_threshold=50.0),
        lambda c: c.EdgeConfig(min_edge_count=-1),
        lambda c: c.ClusterConfig(eps=0),
        lambda c: c.ClusterConfig(min_points=0),
        lambda c: c.ClusterConfig(crop_padding=-2),
        lambda c: c.RasterConfig(method="ghostscript"),
        lambda c: c.PipelineConfig(max_workers=0),
    ])
    def test_validation(self, factory):
        from scanclean import config

        with pytest.raises(ValueError):
            factory(config)

    def test_default_worker_count(self):
        from scanclean.config import default_worker_count

        assert default_worker_count() >= 1


class TestBuildConfig:
    """Test command-line overrides."""

    def test_no_overrides(self):
        from scanclean.cli import build_config

        config = build_config(parse("-i", "book.pdf", "-o", "out"))

        assert config.raster.method == "pdf2image"
        assert config.clusters.crop_padding == 0
        assert config.correction.enabled is True

    def test_overrides(self):
        from scanclean.cli import build_config

        args = parse(
            "-i", "book.pdf", "-o", "out",
            "--rasterizer", "pdfimages",
            "--dpi", "150",
            "--work-dir", "tmp/pages",
            "-j", "2",
            "--min-edges", "1000",
            "--crop", "--padding", "6",
            "--ocr-lang", "fra",
            "--grammar-lang", "de",
            "--no-correction",
            "--strip-non-alphabetic",
            "--strip-chapters",
        )
        config = build_config(args)

        assert config.raster.method == "pdfimages"
        assert config.raster.dpi == 150
        assert config.work_dir == Path("tmp/pages")
        assert config.max_workers == 2
        assert config.edges.min_edge_count == 1000
        assert config.clusters.crop_to_text is True
        assert config.clusters.crop_padding == 6
        assert config.ocr.language == "fra"
        assert config.correction.language == "de"
        assert config.correction.enabled is False
        assert config.cleaning.strip_non_alphabetic is True
        assert config.cleaning.strip_chapter_headings is True

    def test_invalid_override(self):
        from scanclean.cli import build_config

        with pytest.raises(ValueError):
            build_config(parse("-i", "a.pdf", "-o", "out", "--padding", "-1"))

    def test_input_required(self):
        with pytest.raises(SystemExit):
            parse("-o", "out")


class TestRunPipeline:
    """Test running the pipeline from parsed arguments."""

    def test_text_input(self, tmp_path, capsys):
        from scanclean.cli import run_pipeline

        raw = tmp_path / "book.ocr.txt"
        raw.write_text("12\nA hy-\nphen.\n13", encoding="utf-8")
        out = tmp_path / "out"

        code = run_pipeline(parse("-i", str(raw), "-o", str(out), "--no-correction"))

        assert code == 0
        assert (out / "book.txt").read_text(encoding="utf-8") == "A hyphen."
        assert "SCAN CLEANING COMPLETE" in capsys.readouterr().out

    def test_quiet(self, tmp_path, capsys):
        from scanclean.cli import run_pipeline

        raw = tmp_path / "book.ocr.txt"
        raw.write_text("text", encoding="utf-8")

        code = run_pipeline(
            parse("-i", str(raw), "-o", str(tmp_path / "out"), "--no-correction", "-q")
        )

        assert code == 0
        assert capsys.readouterr().out == ""

    def test_unsupported_input_returns_error(self, tmp_path, caplog):
        from scanclean.cli import run_pipeline

        doc = tmp_path / "notes.docx"
        doc.write_bytes(b"")

        code = run_pipeline(parse("-i", str(doc), "-o", str(tmp_path / "out")))

        assert code == 1
        assert "stage 'input'" in caplog.text

    def test_debug_reraises(self, tmp_path):
        from scanclean.cli import run_pipeline
        from scanclean.exceptions import UnsupportedInputError

        doc = tmp_path / "notes.docx"
        doc.write_bytes(b"")

        with pytest.raises(UnsupportedInputError):
            run_pipeline(parse("-i", str(doc), "-o", str(tmp_path / "out"), "--debug"))
