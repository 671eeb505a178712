from __future__ import annotations

import argparse
import asyncio
import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.client.api import GalleryClient
from app.client.grid import render_grid
from app.client.uploads import LocalFile, Uploader
from app.core.errors import GalleryError


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    api_url: str = Field(default="http://localhost:8000/api/v1", alias="GALLERY_API_URL")
    token: str = Field(default="", alias="GALLERY_TOKEN")


async def _upload(client: GalleryClient, paths: list[str]) -> int:
    items = [LocalFile.from_path(p) for p in paths]
    report = await Uploader(client).upload_batch(items)
    for outcome in report.outcomes:
        if outcome.status == "uploaded":
            print(f"uploaded  {outcome.name}")
        elif outcome.status == "unsupported":
            print(outcome.detail, file=sys.stderr)
        else:
            print(f"Failed to upload {outcome.name}: {outcome.detail}. Please try again.", file=sys.stderr)
    return 0 if report.ok else 1


async def _list(client: GalleryClient, columns: int) -> int:
    files = await client.list_files()
    print(render_grid(files, columns=columns))
    return 0


async def _delete(client: GalleryClient, file_id: int, assume_yes: bool) -> int:
    if not assume_yes:
        answer = input("Are you sure you want to delete this file? [y/N] ").strip().lower()
        if answer not in {"y", "yes"}:
            return 0
    try:
        await client.delete_file(file_id)
    except GalleryError as exc:
        print(f"Failed to delete file ({exc.detail}). Please try again.", file=sys.stderr)
        return 1
    print(f"deleted  #{file_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gallery", description="Upload and browse gallery files.")
    parser.add_argument("--api-url", default=None, help="API base URL including prefix")
    parser.add_argument("--token", default=None, help="Bearer token from the identity provider")
    sub = parser.add_subparsers(dest="command", required=True)

    upload = sub.add_parser("upload", help="Upload images, videos or audio files")
    upload.add_argument("paths", nargs="+")

    ls = sub.add_parser("list", help="Show the file grid")
    ls.add_argument("--columns", type=int, default=3)

    rm = sub.add_parser("delete", help="Delete one of your files")
    rm.add_argument("file_id", type=int)
    rm.add_argument("-y", "--yes", action="store_true")
    return parser


async def run(args: argparse.Namespace, client: GalleryClient) -> int:
    if args.command == "upload":
        return await _upload(client, args.paths)
    if args.command == "list":
        return await _list(client, args.columns)
    return await _delete(client, args.file_id, args.yes)


async def _main(args: argparse.Namespace) -> int:
    cfg = ClientSettings()
    async with GalleryClient(args.api_url or cfg.api_url, args.token or cfg.token) as client:
        try:
            return await run(args, client)
        except GalleryError as exc:
            print(f"error: {exc.detail}", file=sys.stderr)
            return 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
