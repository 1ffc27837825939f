#!/usr/bin/env python3
"""
CLI tool for CV analysis
Analyzes a local CV file with the same pipeline as the API
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cv_analysis.core.fallback_parser import analyze_text
from cv_analysis.api.schemas.cv_analysis import CVAnalysisResult, parse_custom_fields
from cv_analysis.infrastructure.storage import LocalStorage
from cv_analysis.services.cv_analysis_service import CVAnalysisService
from cv_analysis.utils.exceptions import CVAnalysisException
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)


def display_results(result: CVAnalysisResult, input_path: str, strategy: str):
    """Display analysis results in a readable format"""
    info = result.personal_info

    print(f"\n{'='*70}")
    print(f"CV ANALYSIS RESULTS")
    print(f"{'='*70}")
    print(f"Input: {input_path}")
    print(f"Strategy: {strategy}")
    print(f"{'='*70}")

    print(f"\nName:  {info.first_name} {info.last_name}".rstrip())
    print(f"Email: {info.email or '-'}")
    print(f"Phone: {info.phone or '-'}")

    print(f"\nWork Experience:")
    print(f"{'-'*70}")
    for job in result.work_experience:
        end = "Present" if job.currently_working else (job.end_date or "?")
        print(f"  {job.start_date or '?'} - {end:<8} {job.role} @ {job.company}")

    print(f"\nEducation:")
    print(f"{'-'*70}")
    for degree in result.education:
        print(f"  {degree.start_date or '?'} - {degree.end_date or '?':<8} {degree.qualification}, {degree.institution}")

    print(f"\nTechnical skills: {', '.join(result.skills.technical) or '-'}")
    print(f"Soft skills:      {', '.join(result.skills.soft) or '-'}")

    if result.summary:
        print(f"\nSummary: {result.summary}")

    if result.custom_fields_suggestions:
        print(f"\nCustom field suggestions:")
        print(f"{'-'*70}")
        for name, value in result.custom_fields_suggestions.items():
            print(f"  {name:>24}: {value}")

    print(f"\n{'='*70}\n")


def main():
    parser = argparse.ArgumentParser(
        description="Extract structured data from a CV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a PDF with Gemini (falls back to rule-based parsing)
  python scripts/analyze_cli.py cv.pdf --job-title "Backend Engineer"

  # Rule-based parsing of a plain text CV, no network
  python scripts/analyze_cli.py cv.txt --offline

  # Suggest answers for custom form fields
  python scripts/analyze_cli.py cv.pdf --fields fields.json

  # Print the result as JSON
  python scripts/analyze_cli.py cv.pdf --json
        """
    )

    parser.add_argument("input_path", help="Path to the CV (pdf, doc, docx or txt)")
    parser.add_argument("--job-title", default=None,
                       help="Job title the CV is analyzed for")
    parser.add_argument("--fields", default=None,
                       help="JSON file with a list of custom field definitions")
    parser.add_argument("--offline", action="store_true",
                       help="Read the file as UTF-8 text and use only the rule-based parser")
    parser.add_argument("--json", action="store_true",
                       help="Print the result as JSON (camelCase keys)")

    args = parser.parse_args()

    input_path = Path(args.input_path)
    if not input_path.is_file():
        print(f"Error: Input file not found: {input_path}")
        return 1

    raw_fields = []
    if args.fields:
        try:
            raw_fields = json.loads(Path(args.fields).read_text(encoding="utf-8"))
            fields = parse_custom_fields(raw_fields)
        except (OSError, json.JSONDecodeError, CVAnalysisException) as e:
            print(f"Error reading custom fields: {e}")
            return 1
    else:
        fields = []

    try:
        if args.offline:
            text = input_path.read_text(encoding="utf-8", errors="replace")
            result = analyze_text(text, fields)
            strategy = "heuristic"
        else:
            service = CVAnalysisService(storage=LocalStorage(base_dir=str(input_path.parent)))
            report = asyncio.run(service.analyze(input_path.name, args.job_title, raw_fields))
            result = report.result
            strategy = report.strategy or "none (diagnostic result)"
    except Exception as e:
        print(f"\nError during analysis: {e}")
        logger.error(f"Analysis failed: {e}", exc_info=True)
        return 1

    if args.json:
        print(result.model_dump_json(by_alias=True, indent=2))
    else:
        display_results(result, str(input_path), strategy)

    return 0


if __name__ == "__main__":
    sys.exit(main())
