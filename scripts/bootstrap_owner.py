import os

from app.core.config import settings
from app.db.session import create_store
from app.repositories.users import UserRepository


def main() -> None:
    open_id = settings.OWNER_OPEN_ID
    if not open_id:
        raise SystemExit("OWNER_OPEN_ID nao definido.")
    name = os.getenv("OWNER_BOOTSTRAP_NAME")
    email = os.getenv("OWNER_BOOTSTRAP_EMAIL")

    store = create_store(settings)
    store.initialize()
    try:
        users = UserRepository(store, owner_open_id=open_id)
        data = {"open_id": open_id}
        if name:
            data["name"] = name
        if email:
            data["email"] = email.strip().lower()
        user_id = users.upsert(data)
        user = users.get_by_id(user_id)
        print(f"Owner {user.role}: id={user.id} openId={user.open_id}")
    finally:
        store.close()


if __name__ == "__main__":
    main()
