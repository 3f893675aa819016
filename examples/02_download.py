"""
Download files to disk with progress
"""
import asyncio
from pathlib import Path
from archfiles import FileClient, NotFoundError


async def main():
    async with FileClient("my_account", username="alice", password="secret") as client:

        def on_progress(downloaded, total):
            if total:
                print(f"\r  {downloaded * 100 // total}%", end="")

        # Into a directory, keeping the remote name
        target = await client.download("/docs/report.pdf", Path("."), progress_callback=on_progress)
        print(f"\nSaved {target}")

        # To an explicit file name
        target = await client.download("/docs/readme.txt", "readme-copy.txt")
        print(f"Saved {target}")

        # Missing files raise NotFoundError
        try:
            await client.download("/does/not/exist.txt")
        except NotFoundError as e:
            print(f"Not found: {e.path}")


if __name__ == "__main__":
    asyncio.run(main())
