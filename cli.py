#!/usr/bin/env python3
"""
Command-line interface for the Image to Code pipeline.
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from image2code.config import Settings
from image2code.errors import GenerationError, ValidationError
from image2code.io.image_loader import ImageValidator
from image2code.pipeline.generation import CodeGenerator

# Load environment variables
load_dotenv()


def cmd_generate(args):
    """Generate HTML and CSS from an image."""
    image_path = Path(args.image)
    if not image_path.exists():
        print(f"❌ Error: Image not found: {image_path}", file=sys.stderr)
        return 1

    validator = ImageValidator()
    candidate = validator.load_candidate(image_path)

    try:
        asset, preview = validator.validate(candidate)
    except ValidationError as e:
        print(f"❌ Image validation failed: {e.message}", file=sys.stderr)
        return 1

    size = f"{preview.width}x{preview.height}px, " if preview.width else ""
    print(f"🖼️  Image: {image_path} ({size}{asset.byte_length:,} bytes, {asset.media_type})", file=sys.stderr)

    settings = Settings.from_env(
        provider=args.provider,
        model_name=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        timeout=args.timeout
    )
    generator = CodeGenerator.from_settings(settings)

    print(f"🤖 Using {settings.provider}/{settings.resolved_model}", file=sys.stderr)
    print("🚀 Generating HTML and CSS...", file=sys.stderr)

    try:
        pair = generator.generate(asset)
    except GenerationError as e:
        print(f"❌ Generation failed ({e.kind.value}): {e.message}", file=sys.stderr)
        return 1

    print("✅ Code generated successfully!", file=sys.stderr)

    if args.json:
        print(json.dumps(pair.to_response(), indent=2))
    else:
        print("<!-- HTML -->")
        print(pair.markup)
        print()
        print("/* CSS */")
        print(pair.stylesheet)

    return 0


def cmd_serve(args):
    """Run the HTTP API."""
    import uvicorn

    from image2code.api.app import create_app

    print(f"🌐 Serving on http://{args.host}:{args.port}", file=sys.stderr)
    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description="Generate HTML and CSS that replicate an image",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate HTML and CSS from an image")
    gen_parser.add_argument("--image", "-i", required=True, help="Path to the image (max 1MB)")
    gen_parser.add_argument("--provider", "-p", choices=["google", "openai", "anthropic"],
                            help="LLM provider (default: IMAGE2CODE_PROVIDER or google)")
    gen_parser.add_argument("--model", help="Model name (default: provider default)")
    gen_parser.add_argument("--temperature", type=float, help="Generation temperature")
    gen_parser.add_argument("--max-tokens", type=int, help="Maximum tokens")
    gen_parser.add_argument("--timeout", type=float, help="Deadline for the remote call (seconds)")
    gen_parser.add_argument("--json", action="store_true", help="Print {\"html\", \"css\"} as JSON")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "generate":
            return cmd_generate(args)
        elif args.command == "serve":
            return cmd_serve(args)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user", file=sys.stderr)
        return 130
    except ValueError as e:
        print(f"\n❌ Configuration error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
