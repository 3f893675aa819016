"""
Session management - Login persistence
"""
import asyncio
from archfiles import APIConfig, FileClient, AuthenticationError


async def main():
    config = APIConfig(base_url="http://localhost:3001")

    # Method 1: Session file
    # First run: logs in with the credentials
    # Next runs: resumes the session saved in my_account.session
    client = FileClient("my_account", config=config)
    await client.start(username="alice", password="secret")
    print(f"Logged in as {client.username}, session valid for {client.current_session.remaining}")
    await client.close()


    # Method 2: Resume only, no credentials
    client = FileClient("my_account", config=config)
    try:
        await client.start()
        print(f"Resumed session of {client.username}")
    except AuthenticationError as e:
        print(f"Could not resume: {e}")
    finally:
        await client.close()


    # Method 3: React to session events
    async with FileClient("my_account", config=config) as client:
        client.on("session_rejected", lambda session: print("Server dropped the session"))
        client.on("logout", lambda session: print(f"Bye {session.username}"))
        await client.start(username="alice", password="secret")

        # Logout and forget the stored session
        await client.logout()


if __name__ == "__main__":
    asyncio.run(main())
