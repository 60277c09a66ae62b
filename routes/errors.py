from fastapi import HTTPException, status

def client_error(e: ValueError) -> HTTPException:
    """Map a service ValueError to 404 when something is missing, else 400."""
    msg = str(e)
    if "not found" in msg.lower():
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=msg)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=msg)
