from __future__ import annotations
import argparse
import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv
from hiring_pipelines.errors import PipelineError
from hiring_pipelines.llm_provider import get_llm
from hiring_pipelines.logging_config import get_logger, setup_logging
from hiring_pipelines.pipelines import run_final_report, run_preparation
from hiring_pipelines.utils import load_document

logger = get_logger("hiring_pipelines.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Candidate evaluation pipelines (Gemini/Mistral)")
    parser.add_argument("--provider", default=None, choices=["auto", "gemini", "mistral"], help="LLM provider selection")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = parser.add_subparsers(dest="command", required=True)

    prepare = sub.add_parser("prepare", help="Screen a candidate before the technical interview")
    prepare.add_argument("--cv", required=True, help="Path to CV file (.txt, .md or .pdf)")
    prepare.add_argument("--requirements", required=True, help="Path to job requirements file")
    prepare.add_argument("--feedback", required=True, help="Path to recruiter feedback file")
    prepare.add_argument("--out", default="preparation_report.json", help="Output JSON path")

    final = sub.add_parser("final-report", help="Build the post-interview report")
    final.add_argument("--cv", required=True, help="Path to CV file (.txt, .md or .pdf)")
    final.add_argument("--transcript", required=True, help="Path to interview transcript file")
    final.add_argument("--values", required=True, help="Path to company values file")
    final.add_argument("--out", default="final_report.json", help="Output JSON path")
    return parser


async def run(args: argparse.Namespace) -> str:
    llm = get_llm(provider=args.provider)
    if args.command == "prepare":
        report = await run_preparation(
            llm,
            cv_text=load_document(args.cv),
            requirements_text=load_document(args.requirements),
            feedback_text=load_document(args.feedback),
        )
    else:
        report = await run_final_report(
            llm,
            cv_text=load_document(args.cv),
            transcript=load_document(args.transcript),
            company_values=load_document(args.values),
        )
    return report.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()  # load .env if exists

    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        output = asyncio.run(run(args))
    except PipelineError as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Run aborted: %s", e)
        print(f"[ERR] {e}", file=sys.stderr)
        return 2

    out_path = Path(args.out)
    out_path.write_text(output, encoding="utf-8")
    print(f"[OK] Report written to: {out_path.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
