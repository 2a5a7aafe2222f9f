import httpx

MODELS_URL = "https://generativelanguage.googleapis.com/v1/models"

async def list_models(api_key: str, client: httpx.AsyncClient = None) -> list:
    """
    Lists the Gemini model names the API key can see.
    Raises ValueError when the response carries no model list (bad key, quota).
    """
    async def _fetch(ac: httpx.AsyncClient) -> dict:
        response = await ac.get(MODELS_URL, params={"key": api_key})
        return response.json()

    if client is not None:
        data = await _fetch(client)
    else:
        async with httpx.AsyncClient(timeout=15) as ac:
            data = await _fetch(ac)

    models = data.get("models") if isinstance(data, dict) else None
    if not isinstance(models, list):
        raise ValueError(f"No models found or invalid key: {data}")
    return [model.get("name", "") for model in models]
