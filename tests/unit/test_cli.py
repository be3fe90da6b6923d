import json
from unittest.mock import patch

from scanredact import cli
from scanredact.application.dependency_container import DependencyContainer
from scanredact.application.pdf_redaction_app import PdfRedactionApplication


class TestCli:
    """Unit tests for the command line entry point."""

    def test_engines_json(self, capsys):
        assert cli.main(["--engines", "--format", "json"]) == 0

        engines = json.loads(capsys.readouterr().out)["engines"]
        assert list(engines) == ["pypdfium2", "pymupdf", "pdf2image"]
        assert engines["pymupdf"]["name"] == "PyMuPDF"

    def test_engines_text_lists_requirements(self, capsys):
        assert cli.main(["--engines"]) == 0

        out = capsys.readouterr().out
        assert "pdf2image: Poppler-based rendering" in out
        assert "requires pdf2image, poppler-utils" in out

    def test_validate(self, sample_pdf, capsys):
        assert cli.main(["--validate", sample_pdf]) == 0
        assert "valid" in capsys.readouterr().out

    def test_missing_queries(self, sample_pdf, capsys):
        assert cli.main([sample_pdf]) == 1
        assert "--queries" in capsys.readouterr().err

    def test_missing_document(self, capsys):
        assert cli.main(["/nonexistent/scan.pdf", "--queries", "secret"]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_redact_json(self, sample_pdf, tmp_path, capsys, blank_rasterizer, ocr_factory, confidential_line):
        container = DependencyContainer(
            rasterizer=blank_rasterizer(),
            ocr_engine_factory=ocr_factory({0: [confidential_line]})
        )
        output = str(tmp_path / "clean.pdf")

        with patch.object(cli, "PdfRedactionApplication",
                          return_value=PdfRedactionApplication(container)):
            code = cli.main([sample_pdf, "-q", "confidential", "-o", output, "--format", "json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["status"] == "redacted"
        assert data["applied_count"] == 1
        assert data["output_document"] == output

    def test_failure_exit_code(self, sample_pdf, capsys, blank_rasterizer, ocr_factory):
        container = DependencyContainer(
            rasterizer=blank_rasterizer(),
            ocr_engine_factory=ocr_factory(fail_on_page=0)
        )

        with patch.object(cli, "PdfRedactionApplication",
                          return_value=PdfRedactionApplication(container)):
            code = cli.main([sample_pdf, "-q", "confidential"])

        out = capsys.readouterr().out
        assert code == 1
        assert "Error (recognize on page 1)" in out
