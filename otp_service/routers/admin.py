from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from otp_service.dependencies import get_otp_service, get_phone_validator, get_repository
from otp_service.models.otp import OtpEntry
from otp_service.schemas.otp import OtpRecordResponse, SweepResponse
from otp_service.services.otp import OtpService
from otp_service.services.phone import PhoneValidator
from otp_service.services.repository import OtpRepository
from otp_service.services.tokens import TokenError, decode_admin_token

router = APIRouter(prefix="/admin/otp", tags=["admin"])


def require_admin(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
        )
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header",
        )
    try:
        token_data = decode_admin_token(token)
    except TokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    return token_data.subject


def _to_response(entry: OtpEntry) -> OtpRecordResponse:
    data = entry.to_dict(not_included_columns=["code"])
    data["purpose"] = entry.purpose.value
    return OtpRecordResponse(**data)


@router.get("/active", response_model=list[OtpRecordResponse])
def list_active(
    phone_number: str = Query(min_length=1, max_length=32),
    _: str = Depends(require_admin),
    repository: OtpRepository = Depends(get_repository),
    validator: PhoneValidator = Depends(get_phone_validator),
) -> list[OtpRecordResponse]:
    validator.validate(phone_number)
    entries = repository.find_active_by_phone(validator.normalize(phone_number))
    return [_to_response(entry) for entry in entries]


@router.post("/sweep", response_model=SweepResponse)
def sweep_expired(
    _: str = Depends(require_admin),
    service: OtpService = Depends(get_otp_service),
) -> SweepResponse:
    return SweepResponse(deleted=service.sweep_expired())


@router.get("/{otp_id}", response_model=OtpRecordResponse)
def get_otp(
    otp_id: str,
    _: str = Depends(require_admin),
    repository: OtpRepository = Depends(get_repository),
) -> OtpRecordResponse:
    return _to_response(repository.find_by_id(otp_id))


@router.delete("/{otp_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_otp(
    otp_id: str,
    _: str = Depends(require_admin),
    repository: OtpRepository = Depends(get_repository),
) -> None:
    repository.delete(otp_id)
