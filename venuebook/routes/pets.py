import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import ROLE_ADMIN, Booking, Pet, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pets", tags=["Pets"])


class EmergencyContact(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relation: Optional[str] = None


class PetCreate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    breed: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    specialRequirements: Optional[str] = None
    notes: Optional[str] = None
    emergencyContact: Optional[EmergencyContact] = None
    customFields: Optional[dict[str, Any]] = None


class PetResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    type: Optional[str] = None
    breed: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    special_requirements: Optional[str] = None
    notes: Optional[str] = None
    emergency_contact: Optional[dict] = None
    custom_fields: Optional[dict] = None

    class Config:
        from_attributes = True


PET_FIELDS = {
    "name": "name",
    "type": "type",
    "breed": "breed",
    "age": "age",
    "gender": "gender",
    "specialRequirements": "special_requirements",
    "notes": "notes",
    "emergencyContact": "emergency_contact",
    "customFields": "custom_fields",
}


def _can_read(db: Session, pet: Pet, user: User) -> bool:
    if user.role == ROLE_ADMIN or pet.owner_id == user.id:
        return True
    # Providers may read pets of clients who booked with them
    return (
        db.query(Booking.id)
        .filter(Booking.client_id == pet.owner_id, Booking.provider_id == user.id)
        .first()
        is not None
    )


def _get_pet(db: Session, pet_id: int) -> Pet:
    pet = db.query(Pet).filter(Pet.id == pet_id).first()
    if not pet:
        raise HTTPException(status_code=404, detail="Pet not found")
    return pet


def _get_owned_pet(db: Session, pet_id: int, user: User) -> Pet:
    pet = _get_pet(db, pet_id)
    if user.role != ROLE_ADMIN and pet.owner_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to modify this pet")
    return pet


@router.get("")
async def list_pets(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    pets = db.query(Pet).filter(Pet.owner_id == current_user.id).order_by(Pet.name).all()
    return {"pets": [PetResponse.model_validate(p) for p in pets]}


@router.get("/{pet_id}")
async def get_pet(
    pet_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    pet = _get_pet(db, pet_id)
    if not _can_read(db, pet, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to view this pet")
    return {"pet": PetResponse.model_validate(pet)}


@router.post("", status_code=201)
async def create_pet(
    data: PetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not data.name or not data.name.strip():
        raise HTTPException(status_code=400, detail="Pet name is required")

    fields = data.model_dump(exclude_none=True)
    pet = Pet(
        owner_id=current_user.id,
        **{PET_FIELDS[k]: v for k, v in fields.items() if k in PET_FIELDS},
    )
    db.add(pet)
    db.commit()
    db.refresh(pet)
    logger.info(f"Pet {pet.id} created for owner {current_user.id}")
    return {"message": "Pet added successfully", "pet": PetResponse.model_validate(pet)}


@router.put("/{pet_id}")
async def update_pet(
    pet_id: int,
    data: PetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    pet = _get_owned_pet(db, pet_id, current_user)
    fields = data.model_dump(exclude_unset=True)
    if "name" in fields and not (fields["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Pet name cannot be empty")

    for key, value in fields.items():
        if key in PET_FIELDS:
            setattr(pet, PET_FIELDS[key], value)
    db.commit()
    db.refresh(pet)
    return {"message": "Pet updated successfully", "pet": PetResponse.model_validate(pet)}


@router.delete("/{pet_id}")
async def delete_pet(
    pet_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    pet = _get_owned_pet(db, pet_id, current_user)
    db.query(Booking).filter(Booking.pet_id == pet.id).update(
        {Booking.pet_id: None}, synchronize_session=False
    )
    db.delete(pet)
    db.commit()
    return {"message": "Pet deleted successfully"}
