#!/usr/bin/env python3
"""
CLI interface for the scanned PDF redaction service.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from scanredact.application.pdf_redaction_app import PdfRedactionApplication

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(verbose: bool = False):
    """Route pipeline logs to stderr so stdout stays parseable."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr
    )


def _target_to_dict(target) -> dict:
    bbox = target.bbox
    return {
        "word": target.word,
        "page": target.page,
        "bbox": [bbox.x0, bbox.y0, bbox.x1, bbox.y1]
    }


def main(argv=None):
    """Main entry point for CLI interface."""
    parser = argparse.ArgumentParser(
        description="Redact phrases from scanned (image-only) PDF documents using OCR",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s scan.pdf --queries "John Doe" "123-45-6789"
    %(prog)s scan.pdf --queries "secret" --output redacted.pdf --passes 2
    %(prog)s --verify redacted.pdf --queries "secret"
    %(prog)s --validate scan.pdf
        """
    )

    parser.add_argument(
        "document",
        nargs="?",
        help="Path to the PDF document to process (optional for --engines)"
    )

    parser.add_argument(
        "--queries", "-q",
        nargs="+",
        help="Phrases to redact (case-insensitive)"
    )

    parser.add_argument(
        "--output", "-o",
        help="Output path for the redacted document (optional)"
    )

    parser.add_argument(
        "--engine", "-e",
        choices=["pypdfium2", "pymupdf", "pdf2image"],
        help="Rasterizer to use (default from PDF_DEFAULT_RASTERIZER, else pypdfium2)"
    )

    parser.add_argument(
        "--passes",
        type=int,
        default=1,
        help="Maximum number of redaction passes over the output (default: 1)"
    )

    parser.add_argument(
        "--verify",
        action="store_true",
        help="Only check whether the document still exposes any of the queries"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Only validate the document without redacting it"
    )

    parser.add_argument(
        "--engines",
        action="store_true",
        help="Show available rasterizers"
    )

    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose mode"
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    app = PdfRedactionApplication()

    try:
        if args.engines:
            engines = {e: app.get_engine_info(e) for e in app.get_supported_engines()}
            if args.format == "json":
                print(json.dumps({"engines": engines}, indent=2))
            else:
                print("Available rasterizers:")
                for engine, info in engines.items():
                    print(f"  - {engine}: {info['description']} (requires {', '.join(info['requires'])})")
            return 0

        if args.validate:
            if not args.document:
                print("Error: A document must be specified for validation", file=sys.stderr)
                return 1
            is_valid = app.validate_document(args.document)
            if args.format == "json":
                print(json.dumps({"valid": is_valid, "document": args.document}))
            else:
                status = "valid" if is_valid else "invalid"
                print(f"Document {args.document}: {status}")
            return 0 if is_valid else 1

        if not args.document:
            print("Error: A document must be specified for redaction", file=sys.stderr)
            return 1

        if not args.queries:
            print("Error: At least one phrase must be specified with --queries", file=sys.stderr)
            return 1

        if not Path(args.document).exists():
            print(f"Error: File {args.document} does not exist", file=sys.stderr)
            return 1

        if args.verify:
            residual = app.verify_redaction(args.document, args.queries, engine=args.engine)
            if args.format == "json":
                print(json.dumps({
                    "clean": not residual,
                    "residual_targets": [_target_to_dict(t) for t in residual]
                }, indent=2))
            else:
                if not residual:
                    print(f"Document {args.document}: clean")
                else:
                    print(f"Document {args.document}: {len(residual)} residual match(es)")
                    for target in residual:
                        print(f"  page {target.page + 1}: '{target.word}'")
            return 0 if not residual else 1

        if args.verbose:
            print(f"Processing document: {args.document}")
            print(f"Phrases to redact: {', '.join(args.queries)}")
            print(f"Engine: {args.engine or 'default'}")

        result = app.redact_document(
            source_path=args.document,
            queries=args.queries,
            destination_path=args.output,
            engine=args.engine,
            passes=args.passes
        )

        if args.format == "json":
            output_data = {
                "success": result.success,
                "status": result.status.value if result.status else None,
                "message": result.message,
                "output_document": result.output_document.path if result.output_document else None,
                "applied_count": result.applied_count,
                "skipped_count": result.skipped_count,
                "passes": result.passes,
                "targets": [_target_to_dict(t) for t in result.targets],
                "error": result.error,
                "failed_stage": result.failed_stage,
                "failed_page": result.failed_page
            }
            print(json.dumps(output_data, indent=2))
        else:
            print(f"Status: {'Success' if result.success else 'Failed'}")
            if result.message:
                print(f"Message: {result.message}")
            if result.output_document:
                print(f"Output: {result.output_document.path}")
            print(f"Redactions applied: {result.applied_count}")
            print(f"Redactions skipped: {result.skipped_count}")

            if result.targets:
                print("\nRedacted lines:")
                for target in result.targets:
                    print(f"  page {target.page + 1}: '{target.word}'")

            if result.error:
                where = f" on page {result.failed_page}" if result.failed_page else ""
                print(f"Error ({result.failed_stage}{where}): {result.error}")

        return 0 if result.success else 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
