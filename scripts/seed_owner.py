# scripts/seed_owner.py
import asyncio
import os
from db.db_operation import mongo_conn, create_indexes
from utils.hash import hash_password
from utils.clock import utc_now

async def seed():
    await create_indexes()
    users = mongo_conn.users_collection
    owner_email = os.getenv("OWNER_EMAIL", "owner@restaurant.com")
    existing = await users.find_one({"email": owner_email})
    if existing:
        print("Owner already exists")
        return
    now = utc_now()
    result = await users.insert_one({
        "email": owner_email,
        "full_name": "Restaurant Owner",
        "password": hash_password(os.getenv("OWNER_PASSWORD", "Owner@123")),
        "token_version": 0,
        "created_at": now
    })
    try:
        await mongo_conn.user_roles.insert_one({
            "user_id": str(result.inserted_id),
            "role": "owner",
            "full_name": "Restaurant Owner",
            "created_at": now,
            "updated_at": now
        })
    except Exception:
        await users.delete_one({"_id": result.inserted_id})
        raise
    print("Created owner:", owner_email, result.inserted_id)

if __name__ == "__main__":
    asyncio.run(seed())
