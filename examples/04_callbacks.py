"""
Callback style - login and fetch with completion handlers
"""
import asyncio
from archfiles import FileClient


async def main():
    client = FileClient.default()  # configured from ARCHFILES_URL
    done = asyncio.Event()

    def fetched(data, response, error):
        if error:
            print(f"Fetch failed [{error.kind.value}]: {error.message}")
        else:
            print(f"Fetched {len(data)} bytes, status {response.status}")
        done.set()

    def logged_in(success, error):
        if not success:
            print(f"Login failed [{error.kind.value}]: {error.message}")
            done.set()
            return
        client.fetch_with_completion("/notes.md", fetched)

    client.login_with_completion("alice", "secret", logged_in)
    await done.wait()
    await client.close()


if __name__ == "__main__":
    asyncio.run(main())
