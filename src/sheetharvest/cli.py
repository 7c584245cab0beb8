"""Command-line interface for SheetHarvest."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import settings
from .exceptions import SheetHarvestError


def main(argv: Optional[list[str]] = None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="SheetHarvest - Extract questionnaire answers from supplier workbooks"
    )
    parser.add_argument(
        "--log-level", default=settings.log_level, help=f"Logging level (default: {settings.log_level})"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Formula map command
    map_parser = subparsers.add_parser(
        "build-formula-map", help="Resolve a reference template into a formula map"
    )
    map_parser.add_argument("template", help="Reference template .xlsx")
    map_parser.add_argument(
        "--output", "-o", default=str(settings.formula_map_path),
        help=f"Where to write the map (default: {settings.formula_map_path})",
    )
    map_parser.add_argument("--template-version", help="Version label (default: template file name)")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Extract answers from filled workbooks")
    extract_parser.add_argument("workbooks", nargs="+", help="Filled .xlsx workbooks")
    extract_parser.add_argument(
        "--catalog", "-c", default=str(settings.catalog_path),
        help=f"Question catalog JSON (default: {settings.catalog_path})",
    )
    extract_parser.add_argument(
        "--formula-map", "-f", help=f"Formula map JSON (default: {settings.formula_map_path} if present)"
    )
    extract_parser.add_argument("--no-formula-map", action="store_true", help="Use tab layouts only")
    extract_parser.add_argument("--layouts", "-l", help="Tab layout registry JSON (default: built-in layouts)")
    extract_parser.add_argument("--tags", "-t", nargs="*", default=[], help="Workbook tags for fuzzy matching")
    extract_parser.add_argument(
        "--workers", "-w", type=int, default=settings.batch_workers,
        help=f"Parallel workbooks (default: {settings.batch_workers})",
    )
    extract_parser.add_argument("--output", "-o", help="Write JSON here instead of stdout")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Suggest tab layouts for a new template")
    analyze_parser.add_argument("template", help="Template .xlsx to analyze")
    analyze_parser.add_argument("--json", action="store_true", help="Print suggested layouts as JSON")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "build-formula-map":
            run_build_formula_map(args.template, args.output, args.template_version)
        elif args.command == "extract":
            run_extract(args)
        elif args.command == "analyze":
            run_analyze(args.template, args.json)
        else:
            parser.print_help()
            sys.exit(1)
    except SheetHarvestError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def run_build_formula_map(template: str, output: str, template_version: Optional[str] = None):
    """Resolve the template's formulas once and save the map."""
    from .formulas import TemplateFormulaResolver

    resolver = TemplateFormulaResolver()
    formula_map = resolver.resolve_file(template, template_version=template_version)
    path = formula_map.save(output)

    print(f"Resolved {len(formula_map.mappings)} questions from {formula_map.source_sheet}")
    for sheet, count in formula_map.by_sheet().items():
        print(f"  {sheet}: {count}")
    if formula_map.unresolved:
        print(f"Unresolved template rows: {len(formula_map.unresolved)}")
    print(f"Saved to {path}")


def run_extract(args: argparse.Namespace):
    """Extract one or more workbooks and emit JSON."""
    from .catalog import build_index
    from .extraction import BatchExtractor, ExtractionContext
    from .formulas import FormulaMapSet
    from .layouts import TabLayoutRegistry

    index = build_index(args.catalog)

    formula_map = None
    if not args.no_formula_map:
        map_path = Path(args.formula_map) if args.formula_map else settings.formula_map_path
        if args.formula_map or map_path.exists():
            formula_map = FormulaMapSet.load(map_path)
        else:
            logging.getLogger(__name__).info(f"No formula map at {map_path}, using tab layouts only")

    layouts_path = args.layouts or settings.layouts_path
    layouts = TabLayoutRegistry.from_json(layouts_path) if layouts_path else TabLayoutRegistry.default()

    context = ExtractionContext(index=index, layouts=layouts, formula_map=formula_map, tags=tuple(args.tags))
    batch = BatchExtractor(context, workers=args.workers).run(args.workbooks)

    payload = {
        "summary": batch.get_statistics(),
        "results": [
            {**result.model_dump(mode="json"), "summary": result.get_statistics()}
            for result in batch.results
        ],
        "failures": [failure.model_dump(mode="json") for failure in batch.failures],
    }
    _emit(json.dumps(payload, indent=2, ensure_ascii=False), args.output)

    if batch.failures and not batch.results:
        sys.exit(1)


def run_analyze(template: str, as_json: bool = False):
    """Print the structure report for an unconfigured template."""
    from .analysis import TemplateStructureAnalyzer
    from .workbook import WorkbookSnapshot

    analyzer = TemplateStructureAnalyzer()
    analyses = analyzer.analyze(WorkbookSnapshot.load(template))

    if as_json:
        layouts = [a.suggested_layout.model_dump(mode="json") for a in analyses if a.suggested_layout]
        print(json.dumps(layouts, indent=2, ensure_ascii=False))
    else:
        print(analyzer.report(analyses))


def _emit(text: str, output: Optional[str]):
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {output}")
    else:
        print(text)


if __name__ == "__main__":
    main()
