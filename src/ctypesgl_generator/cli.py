"""Command line interface for the ctypes OpenGL generator."""

import argparse
import sys
import urllib.request
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import ConfigError, GeneratorConfig, StorageMode, validate_profile
from .generator import BindingGenerator
from .grammar import DeclarationError
from .registry import RegistryError, load_spec

GL_XML_URL = "https://raw.githubusercontent.com/KhronosGroup/OpenGL-Registry/main/xml/gl.xml"


def download_gl_xml(output_path: Path, force: bool = False) -> None:
    """Download the latest gl.xml from Khronos registry."""
    if output_path.exists() and not force:
        print(f"gl.xml already exists at {output_path}. Use --force to re-download.")
        return

    print(f"Downloading gl.xml from {GL_XML_URL}...")

    try:
        urllib.request.urlretrieve(GL_XML_URL, output_path)
        print(f"Downloaded gl.xml to {output_path}")
    except OSError as e:
        print(f"Failed to download gl.xml: {e}")
        sys.exit(1)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate ctypes OpenGL bindings")
    parser.add_argument(
        "--gl-xml", type=Path, default=Path("gl.xml"), help="Path to gl.xml file"
    )
    parser.add_argument(
        "--download",
        action="store_true",
        help="Download latest gl.xml from Khronos registry",
    )
    parser.add_argument(
        "--force", action="store_true", help="Force re-download of gl.xml"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("bindings"),
        help="Output directory for generated packages",
    )
    parser.add_argument(
        "--profile", default="core", help="OpenGL profile to generate (default: core)"
    )
    parser.add_argument(
        "--isolated",
        action="store_true",
        help="Give every version module its own function pointers instead of "
        "sharing one interop table per API family",
    )
    parser.add_argument(
        "--no-error-check",
        action="store_true",
        help="Leave loader error checks out of the generated code",
    )
    parser.add_argument(
        "--no-timestamp",
        action="store_true",
        help="Omit the generation time from file headers",
    )
    return parser


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    return GeneratorConfig(
        mode=StorageMode.ISOLATED if args.isolated else StorageMode.SHARED,
        error_check=not args.no_error_check,
        profile=validate_profile(args.profile),
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_argument_parser().parse_args(argv)

    try:
        config = build_config(args)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        sys.exit(1)

    # Download gl.xml if requested
    if args.download or not args.gl_xml.exists():
        download_gl_xml(args.gl_xml, args.force)

    if not args.gl_xml.exists():
        print(f"gl.xml not found at {args.gl_xml}. Use --download to fetch it.")
        sys.exit(1)

    print(f"Parsing {args.gl_xml} ({config.profile} profile)...")
    try:
        spec = load_spec(str(args.gl_xml), config.profile)
    except (DeclarationError, RegistryError) as err:
        print(f"Error: {err}")
        sys.exit(1)

    generated_at = None if args.no_timestamp else datetime.now(timezone.utc)
    generator = BindingGenerator(spec, config, generated_at)

    for raw in generator.unrecognized_types():
        print(f"Warning: unrecognized type {raw} declared as an opaque c_void_p")

    print(f"Generating {config.mode.value} bindings...")
    for path in generator.generate(args.output_dir):
        print(f"  wrote {path}")

    for version in spec.versions:
        print(f"  {version.name}: {len(version.commands)} functions, {len(version.enums)} enums")
    print(f"Output written to: {args.output_dir}")


if __name__ == "__main__":
    main()
