# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the http responses unit so this responsibility stays isolated, testable, and easy to evolve."""

from fastapi.responses import JSONResponse

from assistantchat.models.chat import Message


def message_json(message: Message, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=message.model_dump())


def error_json(detail: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": detail})
