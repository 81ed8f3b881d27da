from typing import Annotated
from fastapi import Depends, Request
from resource_service.services.dispatch_service import Dispatcher


async def get_dispatcher(request: Request) -> Dispatcher:
    # Built once in the lifespan handler, see main.py
    return request.app.state.dispatcher


DispatcherDependency = Annotated[Dispatcher, Depends(get_dispatcher)]
