from db.db_operation import mongo_conn
from bson import ObjectId
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError
from typing import List, Optional
from models.user import StaffCreate, StaffUpdate, UserRoleOut
from utils.clock import utc_now
from utils.hash import hash_password, verify_password
from utils.jwt_handler import create_access_token
from utils.logger import get_logger

logger = get_logger("USER_SERVICE")

async def create_staff_account(payload: StaffCreate, actor_email: Optional[str] = None) -> UserRoleOut:
    """
    Provision a staff member: the login identity first, then the role record.
    If the role cannot be written the identity is deleted again, so no
    account is left without a role.
    """
    logger.info(f"Staff create request received for email: {payload.email}")
    users_collection = mongo_conn.users_collection
    if await users_collection.find_one({"email": payload.email}):
        raise ValueError("Email already registered")

    now = utc_now()
    user_doc = {
        "email": payload.email,
        "full_name": payload.full_name,
        "password": hash_password(payload.password),
        "token_version": 0,
        "created_at": now
    }
    try:
        result = await users_collection.insert_one(user_doc)
    except DuplicateKeyError:
        raise ValueError("Email already registered")
    user_id = str(result.inserted_id)

    role_doc = {
        "user_id": user_id,
        "role": "staff",
        "full_name": payload.full_name,
        "phone_number": None,
        "hourly_rate": None,
        "created_at": now,
        "updated_at": now
    }
    try:
        await mongo_conn.user_roles.insert_one(role_doc)
    except PyMongoError:
        logger.exception(f"Role assignment failed for {payload.email}, rolling back identity")
        try:
            await users_collection.delete_one({"_id": result.inserted_id})
        except PyMongoError:
            logger.exception(f"Rollback failed, identity {user_id} ({payload.email}) left without a role")
            raise ValueError("Failed to assign role to user. Rollback failed, the login must be removed manually.")
        raise ValueError("Failed to assign role to user. User creation rolled back.")

    logger.info(f"Staff member {payload.full_name} created", extra={"actor": actor_email, "user_id": user_id})
    return UserRoleOut.from_doc({**role_doc, "email": payload.email})

async def authenticate(email: str, password: str) -> dict:
    db_user = await mongo_conn.users_collection.find_one({"email": email})
    if not db_user or not verify_password(password, db_user["password"]):
        logger.warning(f"Login failed for {email}")
        raise ValueError("Invalid credentials")
    user_id = str(db_user["_id"])
    role_doc = await mongo_conn.user_roles.find_one({"user_id": user_id})
    if role_doc is None:
        logger.warning(f"Login refused, no role for {email}")
        raise ValueError("Invalid credentials")
    access_token = create_access_token({
        "id": user_id,
        "sub": db_user["email"],
        "role": role_doc["role"],
        "token_version": db_user.get("token_version", 0)
    })
    logger.info(f"Login successful: {email}")
    return {"access_token": access_token, "token_type": "bearer", "role": role_doc["role"]}

async def sign_out(user_id: str) -> dict:
    """Revoke every token issued so far for this identity."""
    result = await mongo_conn.users_collection.update_one(
        {"_id": ObjectId(user_id)},
        {"$inc": {"token_version": 1}}
    )
    if result.matched_count == 0:
        raise ValueError("User not found")
    logger.info(f"User {user_id} signed out")
    return {"message": "signed_out"}

async def get_role(user_id: str) -> Optional[UserRoleOut]:
    doc = await mongo_conn.user_roles.find_one({"user_id": user_id})
    if not doc:
        return None
    return UserRoleOut.from_doc(doc)

async def list_roles(role: Optional[str] = None) -> List[UserRoleOut]:
    q = {"role": role} if role else {}
    docs = await mongo_conn.user_roles.find(q).sort("full_name", 1).to_list(length=None)
    out = []
    for d in docs:
        try:
            out.append(UserRoleOut.from_doc(d))
        except ValidationError:
            logger.warning(f"Skipping malformed role record for user {d.get('user_id')}")
    return out

async def list_staff() -> List[UserRoleOut]:
    staff = await list_roles("staff")
    ids = []
    for s in staff:
        try:
            ids.append(ObjectId(s.user_id))
        except Exception:
            logger.warning(f"Role record with invalid user id {s.user_id}")
    users = await mongo_conn.users_collection.find({"_id": {"$in": ids}}, {"email": 1}).to_list(length=None)
    emails = {str(u["_id"]): u.get("email") for u in users}
    for s in staff:
        s.email = emails.get(s.user_id)
    return staff

async def update_staff_profile(user_id: str, payload: StaffUpdate, actor_email: Optional[str] = None) -> UserRoleOut:
    update_doc = {k: v for k, v in payload.model_dump().items() if v is not None}
    if not update_doc:
        raise ValueError("Nothing to update")
    update_doc["updated_at"] = utc_now()
    result = await mongo_conn.user_roles.update_one({"user_id": user_id}, {"$set": update_doc})
    if result.matched_count == 0:
        raise ValueError("Staff member not found")
    logger.info(f"Profile updated for {user_id}", extra={"actor": actor_email, "fields": sorted(update_doc)})
    return await get_role(user_id)
