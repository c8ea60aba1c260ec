"""
Pipeline Runner
===============

Runs one generation session (generate → compile → self-heal → store) in the
console, printing every progress event as it is emitted.
Edit USER_INPUT below or pass --input on the command line.

Outputs are saved in pipeline_outputs/<timestamp>/.
"""

import asyncio
import json
import os
import sys
from datetime import datetime
from typing import List

from healing import GenerationRequest, ProgressStream, SessionOutcome
from healing.events import ProgressEvent
from pipeline_config import Settings, build_pipeline


# ============================================================================
# CONFIGURATION - Edit these values to customize the run
# ============================================================================

USER_INPUT = """Create a crowdfunding contract where users can contribute EGLD until a deadline."""
CATEGORY = "crowdfunding"

# ============================================================================


def ensure(path: str):
    """Ensure directory exists"""
    os.makedirs(path, exist_ok=True)


class ConsoleSink:
    """Prints events as they arrive and keeps them for the run report"""

    def __init__(self, show_files: bool = False):
        self.show_files = show_files
        self.events: List[ProgressEvent] = []
        self.files = {}
        self.closed = False

    def send(self, event: ProgressEvent) -> None:
        self.events.append(event)
        data = event.to_dict()
        kind = data["type"]

        if kind == "status":
            progress = data.get("progress")
            suffix = f" ({progress}%)" if progress is not None else ""
            print(f"\n[status] {data['message']}{suffix}")
        elif kind == "terminal":
            stream = sys.stderr if data["isError"] else sys.stdout
            stream.write(data["output"])
            stream.flush()
        elif kind == "file":
            self.files[data["path"]] = data["content"]
            if self.show_files:
                print(f"\n--- {data['path']} ---\n{data['content']}")
        elif kind == "compile_result":
            if not data["success"] and data.get("errors"):
                print(f"\n📋 Compiler errors:\n{data['errors']}")
        elif kind == "error":
            print(f"\n❌ {data['error']}")

    def close(self) -> None:
        self.closed = True


def save_outputs(outdir: str, outcome: SessionOutcome, sink: ConsoleSink) -> None:
    ensure(outdir)

    for rel_path, content in sink.files.items():
        target = os.path.join(outdir, "project", rel_path)
        ensure(os.path.dirname(target))
        with open(target, "w") as f:
            f.write(content)

    heal = outcome.heal_result
    if heal is not None:
        # Project files hold the first draft; the healed code replaces it
        target = os.path.join(outdir, "project", "src", "lib.rs")
        ensure(os.path.dirname(target))
        with open(target, "w") as f:
            f.write(heal.final_source)

    with open(os.path.join(outdir, "events.jsonl"), "w") as f:
        for event in sink.events:
            f.write(json.dumps(event.to_dict()) + "\n")

    report = outcome.to_dict()
    report["heal"] = heal.to_dict() if heal else None
    with open(os.path.join(outdir, "report.json"), "w") as f:
        json.dump(report, f, indent=2, default=str)


async def run_session(description: str, category: str, settings: Settings, show_files: bool = False):
    stream = ProgressStream(verbose=settings.verbose)
    pipeline = build_pipeline(settings, stream)

    session_id = f"cli-{datetime.now().strftime('%Y%m%d%H%M%S')}"
    sink = ConsoleSink(show_files=show_files)
    stream.attach(session_id, sink)
    try:
        return await pipeline.run(GenerationRequest(session_id, description, category, creator="cli")), sink
    finally:
        stream.detach(session_id, sink)


def main():
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Generate, compile, self-heal and store one MultiversX contract",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Use USER_INPUT variable from file (default)
  python run_pipeline.py

  # Override with command-line input, offline
  python run_pipeline.py --input "Create a token vault" --mock --skip-compile
        """
    )
    parser.add_argument("--input", "-i", type=str, help="Override USER_INPUT variable")
    parser.add_argument("--category", "-c", type=str, default=CATEGORY, help="Contract category")
    parser.add_argument("--max-attempts", type=int, help="Maximum compile attempts (overrides MAX_HEAL_ATTEMPTS)")
    parser.add_argument("--mock", action="store_true", help="Use the mock generator and in-memory store")
    parser.add_argument("--skip-compile", action="store_true", help="Store generated code without building")
    parser.add_argument("--no-tests", action="store_true", help="Skip integration test generation")
    parser.add_argument("--show-files", action="store_true", help="Print emitted project files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug output")

    args = parser.parse_args()

    description = args.input or USER_INPUT
    if not description or not description.strip():
        print("❌ USER_INPUT is empty. Edit USER_INPUT in run_pipeline.py or use --input")
        sys.exit(1)

    settings = Settings.from_env()
    if args.mock:
        settings.generator_backend = "mock"
        settings.store_backend = "memory"
    if args.skip_compile:
        settings.skip_compile = True
    if args.no_tests:
        settings.generate_tests = False
    if args.max_attempts:
        settings.max_heal_attempts = args.max_attempts
    if args.verbose:
        settings.verbose = True

    try:
        settings.validate()
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)

    print("\n" + "=" * 80)
    print("MULTIVERSX CONTRACT PIPELINE")
    print("=" * 80)
    print(f"\n📝 Input: {description}")
    print(f"   • Category: {args.category}")
    print(f"   • Generator: {settings.generator_backend}")
    print(f"   • Store: {settings.store_backend}")
    print(f"   • Max attempts: {settings.max_heal_attempts}")
    print(f"   • Compile: {'skipped' if settings.skip_compile else settings.toolchain}")

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    outdir = f"pipeline_outputs/{timestamp}"

    try:
        outcome, sink = asyncio.run(run_session(description, args.category, settings, args.show_files))
    except KeyboardInterrupt:
        print("\n\n⚠️  Pipeline cancelled by user")
        sys.exit(0)
    except Exception as e:
        print(f"\n❌ Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    save_outputs(outdir, outcome, sink)

    print("\n" + "=" * 80)
    if outcome.success:
        print("✅ PIPELINE COMPLETE")
        print(f"   • CID: {outcome.cid}")
        print(f"   • Attempts: {outcome.heal_result.attempts_used}")
    else:
        print(f"❌ PIPELINE FAILED: {outcome.error}")
    print(f"\n📁 All outputs saved in: {outdir}")
    print("=" * 80)

    if not outcome.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
