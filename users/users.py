from fastapi import APIRouter, Depends
from models.user import AuthResult, UserLogin, UserProfileDraft, UserProfileUpdate, UserSignup
from auth.dependencies import Identity, get_admin_identity, get_current_identity
from auth.jwt_handler import create_access_token
from auth.password_handler import hash_password, verify_password
from core.errors import InvalidArgument, NotFound, Unauthenticated, downstream, success
from database.dependencies import get_user_repository
from database.repositories import UserRepository
import logging

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
router = APIRouter(prefix="/api/users", tags=["users"])


# --- Accounts ---

@auth_router.post("/signup", status_code=201)
async def signup(user: UserSignup, users: UserRepository = Depends(get_user_repository)):
    email = user.email.lower()
    with downstream("Failed to create account"):
        existing_user = await users.get_by_email(email)
    if existing_user:
        raise InvalidArgument("Email already registered")

    draft = UserProfileDraft(
        full_name=user.full_name.strip(),
        email=email,
        mobile_number=user.mobile_number,
        password_hash=hash_password(user.password),
    )
    with downstream("Failed to create account"):
        profile = await users.create(draft)

    token = create_access_token(data={"sub": profile.id}, user_type=profile.role)
    logger.info(f"Account created: {profile.id}")
    return success(AuthResult(user=profile, token=token), "Account created successfully", status_code=201)


@auth_router.post("/login")
async def login(credentials: UserLogin, users: UserRepository = Depends(get_user_repository)):
    with downstream("Failed to sign in"):
        found = await users.get_credentials(credentials.email)
    if not found or not verify_password(credentials.password, found[1]):
        raise Unauthenticated("Invalid credentials")

    profile = found[0]
    token = create_access_token(data={"sub": profile.id}, user_type=profile.role)
    return success(AuthResult(user=profile, token=token), "Login successful")


@auth_router.delete("/delete")
async def delete_account(
    identity: Identity = Depends(get_current_identity),
    users: UserRepository = Depends(get_user_repository),
):
    """Removes the caller's profile. Their bookings stay, carrying the snapshot taken at booking time."""
    with downstream("Failed to delete account"):
        deleted = await users.delete(identity.user_id)
    if not deleted:
        raise NotFound("User profile not found")
    logger.info(f"Account deleted: {identity.user_id}")
    return success(message="Account deleted successfully")


# --- Profiles ---

@router.get("/me")
async def get_my_profile(
    identity: Identity = Depends(get_current_identity),
    users: UserRepository = Depends(get_user_repository),
):
    with downstream("Failed to fetch profile"):
        profile = await users.get(identity.user_id)
    if profile is None:
        raise NotFound("User profile not found")
    return success(profile)


@router.put("/me")
async def update_my_profile(
    changes: UserProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    users: UserRepository = Depends(get_user_repository),
):
    update = changes.model_dump(exclude_none=True)
    if "full_name" in update:
        update["full_name"] = update["full_name"].strip()
    with downstream("Failed to update profile"):
        profile = await users.update(identity.user_id, update)
    if profile is None:
        raise NotFound("User profile not found")
    return success(profile, "Profile updated successfully")


@router.get("")
async def list_users(
    admin: Identity = Depends(get_admin_identity),
    users: UserRepository = Depends(get_user_repository),
):
    with downstream("Failed to fetch users"):
        rows = await users.list()
    return success(rows, f"Found {len(rows)} users", count=len(rows))


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    admin: Identity = Depends(get_admin_identity),
    users: UserRepository = Depends(get_user_repository),
):
    with downstream("Failed to fetch user"):
        profile = await users.get(user_id)
    if profile is None:
        raise NotFound("User not found")
    return success(profile)
