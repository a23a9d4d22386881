"""FastAPI server exposing the TACO food queries over HTTP."""

import logging
from typing import Any, Dict, List, Literal, Optional, Union

import uvicorn
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from taco_search.data_layer.exceptions import InvalidQueryError
from taco_search.data_layer.food_db import FoodDB
from taco_search.data_layer.nutrient_fields import describe_fields
from taco_search.data_layer.settings import Settings
from taco_search.output.formatters import (
    format_batch_json,
    format_food_json,
    format_foods_json,
    format_search_hit_json,
)
from taco_search.search.query_planner import QueryPlanner
from taco_search.search.text_index import SearchIndex, SearchOptions

logger = logging.getLogger(__name__)

SortField = Literal["energy_kcal", "protein_g", "carbohydrate_g", "lipid_g", "fiber_g"]


class NutrientFilterRequest(BaseModel):
    nutrient: str = Field(description="Nutrient field name, e.g. 'protein_g', 'fiber_g'.")
    min: Optional[float] = Field(default=None, description="Minimum value for the nutrient.")
    max: Optional[float] = Field(default=None, description="Maximum value for the nutrient.")
    limit: Optional[int] = Field(default=None, description="Maximum number of results.")


class AdvancedSearchRequest(BaseModel):
    """Optional text, nutrient ranges and sorting.

    Names and categories are in Brazilian Portuguese, as in the TACO table
    (e.g. 'arroz integral', 'cereais', 'frango grelhado').
    """

    model_config = ConfigDict(extra="forbid")

    query: Optional[str] = None
    min_energy_kcal: Optional[float] = None
    max_energy_kcal: Optional[float] = None
    min_protein_g: Optional[float] = None
    max_protein_g: Optional[float] = None
    min_carbohydrate_g: Optional[float] = None
    max_carbohydrate_g: Optional[float] = None
    min_lipid_g: Optional[float] = None
    max_lipid_g: Optional[float] = None
    min_fiber_g: Optional[float] = None
    max_fiber_g: Optional[float] = None
    sort_by: Optional[SortField] = None
    sort_order: Literal["asc", "desc"] = "desc"
    limit: Optional[int] = None


class BatchSearchRequest(BaseModel):
    # Objects are validated per item, so one bad item does not fail the request
    queries: List[Union[str, Dict[str, Any]]] = Field(
        description="Queries to run: plain strings or advanced search objects."
    )


def _advanced_params(request: AdvancedSearchRequest) -> Dict[str, Any]:
    return request.model_dump(exclude_none=True)


def create_app(planner: QueryPlanner) -> FastAPI:
    """Create the HTTP app around an already-loaded planner.

    Args:
        planner: QueryPlanner over the loaded dataset

    Returns:
        FastAPI application
    """
    app = FastAPI(title="TACO Food Search API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Local development
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidQueryError)
    async def invalid_query(request: Request, exc: InvalidQueryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/api/foods/search")
    def search_foods(
        query: str = Query(description="Search terms, e.g. 'arroz integral', 'cereais'."),
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return [format_search_hit_json(hit) for hit in planner.search_foods(query, limit)]

    @app.get("/api/foods/random")
    def random_food() -> Dict[str, Any]:
        food = planner.random_food()
        if food is None:
            raise HTTPException(status_code=404, detail="No foods in the database.")
        return format_food_json(food)

    @app.get("/api/foods/{food_id}")
    def get_food(food_id: int) -> Dict[str, Any]:
        food = planner.get_food_by_id(food_id)
        if food is None:
            raise HTTPException(status_code=404, detail=f"No food found with ID {food_id}.")
        return format_food_json(food)

    @app.get("/api/categories")
    def list_categories() -> List[str]:
        return planner.list_categories()

    @app.get("/api/fields")
    def list_fields() -> List[Dict[str, Optional[str]]]:
        return describe_fields()

    @app.post("/api/foods/filter")
    def filter_by_nutrient(request: NutrientFilterRequest) -> List[Dict[str, Any]]:
        foods = planner.filter_by_nutrient(
            request.nutrient, request.min, request.max, request.limit
        )
        return format_foods_json(foods)

    @app.post("/api/foods/advanced")
    def advanced_search(request: AdvancedSearchRequest) -> List[Dict[str, Any]]:
        return format_foods_json(planner.advanced_search(_advanced_params(request)))

    @app.post("/api/foods/batch")
    def batch_search(request: BatchSearchRequest) -> List[Dict[str, Any]]:
        return format_batch_json(planner.batch_search(request.queries))

    return app


def build_planner(settings: Settings) -> QueryPlanner:
    """Load the dataset and build the index once, before serving.

    Raises:
        DatasetLoadError: If the dataset cannot be loaded
    """
    food_db = FoodDB(settings.dataset_path)
    options = SearchOptions(
        fuzzy=settings.fuzzy,
        prefix=settings.prefix,
        boosts={
            "description": settings.description_boost,
            "category": settings.category_boost,
        },
    )
    index = SearchIndex.build(food_db.get_all_foods(), options)
    return QueryPlanner(food_db, index=index, default_limit=settings.default_limit)


def serve(settings: Settings) -> None:
    """Load the dataset, then run the HTTP server until interrupted."""
    app = create_app(build_planner(settings))
    logger.info("Serving TACO food search on http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    serve(Settings.from_env())
