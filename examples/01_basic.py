"""
Basic usage - Login, list a folder and fetch a file
"""
import asyncio
from archfiles import FileClient


async def main():
    # Direct credentials (session kept in memory)
    async with FileClient(username="alice", password="secret") as client:

        listing = await client.list_directory("/")
        print(f"Connected as {client.username}!")

        print("\nFiles in /:")
        for entry in listing:
            print(f"  {entry}")

        result = await client.fetch("/notes.md")
        print(f"\n{result.path}: {result.size} bytes ({result.response.content_type})")
        print(result.text())


if __name__ == "__main__":
    asyncio.run(main())
