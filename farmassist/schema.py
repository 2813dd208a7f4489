from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

# Farming Type

class FarmingType(str, Enum):
    crops = "crops"
    animals = "animals"
    mixed = "mixed"
    aquaculture = "aquaculture"


# Weather Data Models

class WeatherReading(BaseModel):
    temperature: float                      # °C
    humidity: float = Field(ge=0, le=100)   # %
    wind_speed: float                       # km/h
    precipitation: float                    # mm


class CurrentWeather(WeatherReading):
    condition: str
    wind_direction: str
    pressure: float
    visibility: float
    uv_index: float
    last_updated: str
    feels_like: float
    cloud_cover: float
    wind_chill: Optional[float] = None
    heat_index: Optional[float] = None
    dew_point: Optional[float] = None
    wind_gust: Optional[float] = None
    is_day: Optional[int] = None
    condition_code: Optional[int] = None
    condition_icon: Optional[str] = None


class ForecastDay(BaseModel):
    date: str
    max_temp: float
    min_temp: float
    avg_temp: Optional[float] = None
    condition: str
    humidity: float
    wind_speed: float
    precipitation: float
    uv_index: float
    visibility: Optional[float] = None
    will_it_rain: Optional[int] = None
    chance_of_rain: Optional[float] = None
    condition_code: Optional[int] = None
    condition_icon: Optional[str] = None


class HourlyWeather(BaseModel):
    time: str
    temperature: float
    condition: str
    humidity: float
    wind_speed: float
    wind_direction: str
    precipitation: float
    uv_index: float
    feels_like: Optional[float] = None
    wind_chill: Optional[float] = None
    heat_index: Optional[float] = None
    dew_point: Optional[float] = None
    will_it_rain: Optional[int] = None
    chance_of_rain: Optional[float] = None
    is_day: Optional[int] = None


class WeatherAlert(BaseModel):
    headline: Optional[str] = None
    type: Optional[str] = None
    severity: Optional[str] = None
    urgency: Optional[str] = None
    areas: Optional[str] = None
    category: Optional[str] = None
    certainty: Optional[str] = None
    event: Optional[str] = None
    note: Optional[str] = None
    effective: Optional[str] = None
    expires: Optional[str] = None
    description: Optional[str] = None
    instruction: Optional[str] = None


# Air Quality / Environment Models

class AirQualityReading(BaseModel):
    pm2_5: float   # µg/m³
    pm10: float    # µg/m³


class AirQuality(AirQualityReading):
    co: float
    o3: float
    no2: float
    so2: float
    us_epa_index: Optional[int] = None
    gb_defra_index: Optional[int] = None


class Pollen(BaseModel):
    hazel: float
    alder: float
    birch: float
    oak: float
    grass: float
    mugwort: float
    ragweed: float


class Astronomy(BaseModel):
    sunrise: str
    sunset: str
    moonrise: str
    moonset: str
    moon_phase: str
    moon_illumination: float
    is_moon_up: Optional[int] = None
    is_sun_up: Optional[int] = None


class MarineWeather(BaseModel):
    significant_wave_height: Optional[float] = None
    swell_height: Optional[float] = None
    swell_direction: Optional[float] = None
    swell_period: Optional[float] = None
    water_temperature: Optional[float] = None


class Tide(BaseModel):
    time: str
    height: float
    type: str


# Disease Risk Models

class PlantDiseaseRisk(BaseModel):
    fungal_risk: float = 0
    bacterial_risk: float = 0
    viral_risk: float = 0   # never computed
    pest_risk: float = 0
    recommended_actions: List[str] = Field(default_factory=list)


class AnimalDiseaseRisk(BaseModel):
    heat_stress_risk: float = 0
    respiratory_risk: float = 0
    parasite_risk: float = 0
    feed_contamination_risk: float = 0
    recommended_actions: List[str] = Field(default_factory=list)


class DiseaseRisk(BaseModel):
    plant_diseases: Optional[PlantDiseaseRisk] = None
    animal_diseases: Optional[AnimalDiseaseRisk] = None


class DiseaseRiskRequest(BaseModel):
    current: WeatherReading
    air_quality: Optional[AirQualityReading] = None
    farming_type: FarmingType = FarmingType.mixed


# Weather Tool Models

class WeatherRequest(BaseModel):
    location: str
    days: int = 3   # 1-14
    include_air_quality: bool = True
    include_pollen: bool = True
    include_astronomy: bool = True
    include_alerts: bool = True
    include_hourly: bool = False
    include_marine: bool = False
    include_tides: bool = False
    farming_type: FarmingType = FarmingType.mixed


class WeatherResult(BaseModel):
    location: str
    current: CurrentWeather
    forecast: List[ForecastDay]
    hourly: Optional[List[HourlyWeather]] = None
    alerts: List[WeatherAlert] = Field(default_factory=list)
    air_quality: Optional[AirQuality] = None
    pollen: Optional[Pollen] = None
    astronomy: Optional[Astronomy] = None
    marine: Optional[MarineWeather] = None
    tides: Optional[List[Tide]] = None
    disease_risk: DiseaseRisk
    is_fallback: bool = False
