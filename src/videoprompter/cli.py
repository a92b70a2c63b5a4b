from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from .concepts.engine import ConceptRequest
from .config import ConfigurationInvalidError
from .constraints.registry import supported_models
from .constraints.validator import RequestRejectedError
from .generation.llm import GenerationError
from .orchestrator import PromptStudio
from .video_prompt.engine import PromptRequest
from .video_prompt.utils import MalformedPromptError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate storyboard concepts and structured video prompts from a creative brief."
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional path to service configuration JSON/YAML",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the JSON result to this file instead of stdout",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    concepts = commands.add_parser("concepts", help="Generate three storyboard concepts")
    concepts.add_argument("creative_direction", help="Free-text creative direction")
    concepts.add_argument(
        "--target-duration",
        type=float,
        help="Target video duration in seconds (default 6)",
    )
    concepts.add_argument("--image-analysis", help="Reference image analysis text")

    prompt = commands.add_parser("prompt", help="Generate a JSON video prompt for a concept")
    prompt.add_argument("--model", required=True, choices=supported_models())
    prompt.add_argument("--duration", type=int, required=True, help="Video duration in seconds")
    prompt.add_argument("--aspect-ratio", required=True, help="16:9 or 9:16")
    source = prompt.add_mutually_exclusive_group(required=True)
    source.add_argument("--concept", help="Concept text")
    source.add_argument("--concept-file", type=Path, help="File holding the concept text")
    prompt.add_argument("--shot-count", default="auto", help="Number of shots or 'auto'")
    prompt.add_argument("--prompt-model", help="Override the text model used for prompt generation")
    prompt.add_argument("--image-analysis", help="Reference image analysis text")
    prompt.add_argument("--image-url", help="Reference image URL")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        studio = PromptStudio.from_file(args.config) if args.config else PromptStudio.default()
    except ConfigurationInvalidError as exc:
        parser.error(str(exc))

    try:
        if args.command == "concepts":
            payload = studio.generate_concepts(
                ConceptRequest(
                    creative_direction=args.creative_direction,
                    image_analysis=args.image_analysis,
                    target_duration=args.target_duration,
                )
            ).to_payload()
        else:
            concept = (
                args.concept_file.read_text(encoding="utf-8") if args.concept_file else args.concept
            )
            payload = studio.generate_prompt(
                PromptRequest(
                    model=args.model,
                    concept=concept,
                    duration=args.duration,
                    aspect_ratio=args.aspect_ratio,
                    shot_count=args.shot_count,
                    prompt_model=args.prompt_model,
                    image_analysis=args.image_analysis,
                    image_url=args.image_url,
                )
            ).to_payload()
    except RequestRejectedError as exc:
        parser.error(str(exc))
    except (GenerationError, MalformedPromptError) as exc:
        print(f"Generation failed: {exc}", file=sys.stderr)
        return 1

    text = json.dumps(payload, indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        print(f"Wrote result to {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
