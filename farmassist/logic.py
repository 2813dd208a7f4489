import os
from dotenv import load_dotenv

load_dotenv()   # must run before the env lookups below

import math
import requests
import numpy as np
from datetime import datetime, timedelta, timezone
from typing import Optional

from farmassist.logger import logger
from farmassist.schema import (
    FarmingType,
    WeatherReading,
    CurrentWeather,
    ForecastDay,
    HourlyWeather,
    WeatherAlert,
    AirQualityReading,
    AirQuality,
    Pollen,
    Astronomy,
    MarineWeather,
    Tide,
    PlantDiseaseRisk,
    AnimalDiseaseRisk,
    DiseaseRisk,
    WeatherRequest,
    WeatherResult,
)


# Weather provider setup

WEATHER_API_KEY = os.getenv("WEATHER_API_KEY")

WEATHER_API_BASE = "http://api.weatherapi.com/v1"
FORECAST_URL = f"{WEATHER_API_BASE}/forecast.json"
ASTRONOMY_URL = f"{WEATHER_API_BASE}/astronomy.json"
MARINE_URL = f"{WEATHER_API_BASE}/marine.json"

REQUEST_TIMEOUT = 10
DEFAULT_DAYS = 3
MAX_DAYS = 14
HOURLY_LIMIT = 24

PLANT_FARMING_TYPES = (FarmingType.crops, FarmingType.mixed)
ANIMAL_FARMING_TYPES = (FarmingType.animals, FarmingType.mixed)


# Nigerian city names as the provider knows them
CITY_MAPPINGS = {
    "lagos": "Lagos",
    "abuja": "Abuja",
    "kano": "Kano",
    "port harcourt": "Port Harcourt",
    "ibadan": "Ibadan",
    "benin": "Benin City",
    "maiduguri": "Maiduguri",
    "zaria": "Zaria",
    "aba": "Aba",
    "jos": "Jos",
    "ilorin": "Ilorin",
    "oyo": "Oyo",
    "enugu": "Enugu",
    "abeokuta": "Abeokuta",
    "sokoto": "Sokoto",
    "onitsha": "Onitsha",
    "warri": "Warri",
    "calabar": "Calabar",
    "akure": "Akure",
    "bauchi": "Bauchi",
}


# Static Nigerian weather used when the provider is unreachable
FALLBACK_ICON = "//cdn.weatherapi.com/weather/64x64/day/{}.png"

FALLBACK_CURRENT = {
    "temperature": 28,
    "condition": "Partly Cloudy",
    "humidity": 75,
    "wind_speed": 12,
    "wind_direction": "SW",
    "pressure": 1013,
    "visibility": 10,
    "uv_index": 6,
    "feels_like": 30,
    "cloud_cover": 50,
    "precipitation": 2,
    "wind_chill": 26,
    "heat_index": 32,
    "dew_point": 22,
    "wind_gust": 18,
    "is_day": 1,
    "condition_code": 1003,
    "condition_icon": FALLBACK_ICON.format(116),
}

FALLBACK_FORECAST = [
    {"max_temp": 32, "min_temp": 24, "avg_temp": 28, "condition": "Partly Cloudy", "humidity": 70,
     "wind_speed": 15, "precipitation": 2, "uv_index": 6, "visibility": 10, "will_it_rain": 0,
     "chance_of_rain": 20, "condition_code": 1003, "condition_icon": FALLBACK_ICON.format(116)},
    {"max_temp": 30, "min_temp": 23, "avg_temp": 26, "condition": "Light Rain", "humidity": 80,
     "wind_speed": 18, "precipitation": 8, "uv_index": 4, "visibility": 8, "will_it_rain": 1,
     "chance_of_rain": 70, "condition_code": 1183, "condition_icon": FALLBACK_ICON.format(302)},
    {"max_temp": 31, "min_temp": 25, "avg_temp": 28, "condition": "Sunny", "humidity": 65,
     "wind_speed": 10, "precipitation": 0, "uv_index": 7, "visibility": 12, "will_it_rain": 0,
     "chance_of_rain": 10, "condition_code": 1000, "condition_icon": FALLBACK_ICON.format(113)},
]

FALLBACK_HOURLY = [
    {"time": "00:00", "temperature": 26, "condition": "Clear", "humidity": 80, "wind_speed": 8,
     "wind_direction": "SW", "precipitation": 0, "uv_index": 0, "feels_like": 28, "wind_chill": 26,
     "heat_index": 28, "dew_point": 22, "will_it_rain": 0, "chance_of_rain": 10, "is_day": 0},
    {"time": "06:00", "temperature": 24, "condition": "Partly Cloudy", "humidity": 85, "wind_speed": 6,
     "wind_direction": "SW", "precipitation": 0, "uv_index": 1, "feels_like": 26, "wind_chill": 24,
     "heat_index": 26, "dew_point": 21, "will_it_rain": 0, "chance_of_rain": 15, "is_day": 0},
    {"time": "12:00", "temperature": 32, "condition": "Sunny", "humidity": 60, "wind_speed": 12,
     "wind_direction": "SW", "precipitation": 0, "uv_index": 8, "feels_like": 35, "wind_chill": 32,
     "heat_index": 35, "dew_point": 23, "will_it_rain": 0, "chance_of_rain": 5, "is_day": 1},
    {"time": "18:00", "temperature": 29, "condition": "Partly Cloudy", "humidity": 70, "wind_speed": 10,
     "wind_direction": "SW", "precipitation": 0, "uv_index": 3, "feels_like": 32, "wind_chill": 29,
     "heat_index": 32, "dew_point": 22, "will_it_rain": 0, "chance_of_rain": 20, "is_day": 1},
]

FALLBACK_AIR_QUALITY = {
    "co": 0.5, "o3": 45.2, "no2": 12.8, "so2": 3.1,
    "pm2_5": 15.3, "pm10": 22.1, "us_epa_index": 2, "gb_defra_index": 3,
}

FALLBACK_POLLEN = {
    "hazel": 5.2, "alder": 2.1, "birch": 8.7, "oak": 12.3,
    "grass": 45.6, "mugwort": 3.2, "ragweed": 1.8,
}

FALLBACK_ASTRONOMY = {
    "sunrise": "06:30 AM", "sunset": "06:45 PM", "moonrise": "08:15 PM", "moonset": "07:20 AM",
    "moon_phase": "Waxing Crescent", "moon_illumination": 25, "is_moon_up": 0, "is_sun_up": 1,
}

FALLBACK_MARINE = {
    "significant_wave_height": 1.2, "swell_height": 0.8, "swell_direction": 225,
    "swell_period": 8.5, "water_temperature": 28,
}

FALLBACK_TIDES = [
    {"time": "06:30", "height": 1.2, "type": "High"},
    {"time": "12:45", "height": 0.3, "type": "Low"},
    {"time": "18:20", "height": 1.5, "type": "High"},
]


# 1. DISEASE RISK

def _clamp_risk(value: float) -> float:
    return float(np.clip(value, 0.0, 100.0))


def _plant_disease_risk(current: WeatherReading, air_quality: Optional[AirQualityReading]) -> PlantDiseaseRisk:
    temp = current.temperature
    humidity = current.humidity
    actions = []

    fungal = 0
    if humidity > 80 and 20 < temp < 30:
        fungal = min(90, (humidity - 70) * 2)
        actions.append("High fungal disease risk - apply fungicide preventively")
    elif humidity > 70:
        fungal = min(60, (humidity - 60) * 1.5)
        actions.append("Moderate fungal risk - monitor crops closely")

    bacterial = 0
    if humidity > 75 and temp > 25:
        bacterial = min(85, ((humidity - 70) + (temp - 25)) * 2)
        actions.append("High bacterial risk - ensure proper drainage and ventilation")

    # Warm, still air favours pests
    pest = 0
    if 22 < temp < 35 and current.wind_speed < 10:
        pest = min(80, (35 - temp) * 2 + (10 - current.wind_speed))
        actions.append("High pest activity - apply pest control measures")

    if air_quality is not None and air_quality.pm2_5 > 25:
        actions.append("Poor air quality - protect crops from pollution damage")

    return PlantDiseaseRisk(
        fungal_risk=_clamp_risk(fungal),
        bacterial_risk=_clamp_risk(bacterial),
        viral_risk=0,
        pest_risk=_clamp_risk(pest),
        recommended_actions=actions,
    )


def _animal_disease_risk(current: WeatherReading, air_quality: Optional[AirQualityReading]) -> AnimalDiseaseRisk:
    temp = current.temperature
    humidity = current.humidity
    actions = []

    heat_stress = 0
    if temp > 30:
        heat_stress = min(95, (temp - 25) * 5)
        actions.append("High heat stress risk - provide shade and water")
    elif temp > 25:
        heat_stress = min(60, (temp - 20) * 3)
        actions.append("Moderate heat stress - monitor animal behavior")

    respiratory = 0
    if air_quality is not None and (air_quality.pm2_5 > 20 or air_quality.pm10 > 30):
        respiratory = min(90, air_quality.pm2_5 * 2 + air_quality.pm10)
        actions.append("High respiratory risk - improve ventilation and air quality")

    parasite = 0
    if humidity > 70 and 20 < temp < 35:
        parasite = min(85, (humidity - 60) * 1.5 + (temp - 20))
        actions.append("High parasite risk - implement parasite control program")

    feed_contamination = 0
    if humidity > 80 and current.precipitation > 5:
        feed_contamination = min(90, (humidity - 70) + current.precipitation * 2)
        actions.append("High feed contamination risk - store feed properly and check for mold")

    return AnimalDiseaseRisk(
        heat_stress_risk=_clamp_risk(heat_stress),
        respiratory_risk=_clamp_risk(respiratory),
        parasite_risk=_clamp_risk(parasite),
        feed_contamination_risk=_clamp_risk(feed_contamination),
        recommended_actions=actions,
    )


def estimate_disease_risk(
    current: WeatherReading,
    air_quality: Optional[AirQualityReading],
    farming_type: FarmingType,
) -> DiseaseRisk:
    """
    Map a weather snapshot to plant and animal disease risks (0-100).

    - crops / mixed   => plant_diseases
    - animals / mixed => animal_diseases
    - aquaculture     => neither group

    Missing air quality skips the pollution checks. Each risk is clamped
    to [0, 100] and actions keep rule order.
    """
    farming_type = FarmingType(farming_type)

    plant = None
    if farming_type in PLANT_FARMING_TYPES:
        plant = _plant_disease_risk(current, air_quality)

    animal = None
    if farming_type in ANIMAL_FARMING_TYPES:
        animal = _animal_disease_risk(current, air_quality)

    logger.debug(
        "Disease risk (%s) for %s°C / %s%%: plant=%s, animal=%s",
        farming_type.value, current.temperature, current.humidity, plant, animal,
    )
    return DiseaseRisk(plant_diseases=plant, animal_diseases=animal)


# 2. LOCATION / PARAMS

def normalize_location(location: str) -> str:
    return CITY_MAPPINGS.get(location.strip().lower(), location)


def clamp_days(days: Optional[int]) -> int:
    return min(days or DEFAULT_DAYS, MAX_DAYS)


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


# 3. WEATHER API

def _round(value) -> int:
    # half-up: 27.5 -> 28
    return int(math.floor(float(value) + 0.5))


def _round2(value) -> float:
    return math.floor(float(value) * 100 + 0.5) / 100


def _round_if(value) -> Optional[int]:
    return _round(value) if value else None


def fetch_forecast(location: str, days: int, request: WeatherRequest, api_key: str) -> dict:
    params = {
        "key": api_key,
        "q": location,
        "days": days,
        "aqi": _yes_no(request.include_air_quality),
        "pollen": _yes_no(request.include_pollen),
        "alerts": _yes_no(request.include_alerts),
    }

    r = requests.get(FORECAST_URL, params=params, timeout=REQUEST_TIMEOUT)
    r.raise_for_status()
    return r.json()


def _fetch_optional(url: str, params: dict, label: str) -> Optional[dict]:
    try:
        r = requests.get(url, params=params, timeout=REQUEST_TIMEOUT)
        if not r.ok:
            return None
        return r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"{label} data not available: {e}")
        return None


def fetch_astronomy(location: str, api_key: str) -> Optional[dict]:
    params = {
        "key": api_key,
        "q": location,
        "dt": datetime.now(timezone.utc).date().isoformat(),
    }
    return _fetch_optional(ASTRONOMY_URL, params, "Astronomy")


def fetch_marine(location: str, days: int, include_tides: bool, api_key: str) -> Optional[dict]:
    params = {
        "key": api_key,
        "q": location,
        "days": days,
        "tides": _yes_no(include_tides),
    }
    return _fetch_optional(MARINE_URL, params, "Marine weather")


# 4. PAYLOAD PARSING

def parse_current(raw: dict) -> CurrentWeather:
    return CurrentWeather(
        temperature=_round(raw["temp_c"]),
        condition=raw["condition"]["text"],
        humidity=raw["humidity"],
        wind_speed=_round(raw["wind_kph"]),
        wind_direction=raw["wind_dir"],
        pressure=_round(raw["pressure_mb"]),
        visibility=_round(raw["vis_km"]),
        uv_index=raw["uv"],
        last_updated=raw["last_updated"],
        feels_like=_round(raw["feelslike_c"]),
        cloud_cover=raw["cloud"],
        precipitation=_round(raw["precip_mm"]),
        wind_chill=_round_if(raw.get("windchill_c")),
        heat_index=_round_if(raw.get("heatindex_c")),
        dew_point=_round_if(raw.get("dewpoint_c")),
        wind_gust=_round_if(raw.get("gust_kph")),
        is_day=raw.get("is_day"),
        condition_code=raw["condition"].get("code"),
        condition_icon=raw["condition"].get("icon"),
    )


def parse_forecast_day(raw: dict) -> ForecastDay:
    day = raw["day"]
    return ForecastDay(
        date=raw["date"],
        max_temp=_round(day["maxtemp_c"]),
        min_temp=_round(day["mintemp_c"]),
        avg_temp=_round_if(day.get("avgtemp_c")),
        condition=day["condition"]["text"],
        humidity=day["avghumidity"],
        wind_speed=_round(day["maxwind_kph"]),
        precipitation=_round(day["totalprecip_mm"]),
        uv_index=day["uv"],
        visibility=_round_if(day.get("avgvis_km")),
        will_it_rain=day.get("daily_will_it_rain"),
        chance_of_rain=day.get("daily_chance_of_rain"),
        condition_code=day["condition"].get("code"),
        condition_icon=day["condition"].get("icon"),
    )


def parse_hour(raw: dict) -> HourlyWeather:
    return HourlyWeather(
        time=raw["time"],
        temperature=_round(raw["temp_c"]),
        condition=raw["condition"]["text"],
        humidity=raw["humidity"],
        wind_speed=_round(raw["wind_kph"]),
        wind_direction=raw["wind_dir"],
        precipitation=_round(raw["precip_mm"]),
        uv_index=raw["uv"],
        feels_like=_round_if(raw.get("feelslike_c")),
        wind_chill=_round_if(raw.get("windchill_c")),
        heat_index=_round_if(raw.get("heatindex_c")),
        dew_point=_round_if(raw.get("dewpoint_c")),
        will_it_rain=raw.get("will_it_rain"),
        chance_of_rain=raw.get("chance_of_rain"),
        is_day=raw.get("is_day"),
    )


def parse_alert(raw: dict) -> WeatherAlert:
    return WeatherAlert(
        headline=raw.get("headline"),
        type=raw.get("msgType") or raw.get("event"),
        severity=raw.get("severity"),
        urgency=raw.get("urgency"),
        areas=raw.get("areas"),
        category=raw.get("category"),
        certainty=raw.get("certainty"),
        event=raw.get("event"),
        note=raw.get("note"),
        effective=raw.get("effective"),
        expires=raw.get("expires"),
        description=raw.get("desc"),
        instruction=raw.get("instruction"),
    )


def parse_air_quality(raw: dict) -> AirQuality:
    return AirQuality(
        co=_round2(raw["co"]),
        o3=_round2(raw["o3"]),
        no2=_round2(raw["no2"]),
        so2=_round2(raw["so2"]),
        pm2_5=_round2(raw["pm2_5"]),
        pm10=_round2(raw["pm10"]),
        us_epa_index=raw.get("us-epa-index"),
        gb_defra_index=raw.get("gb-defra-index"),
    )


def parse_pollen(raw: dict) -> Pollen:
    return Pollen(**{k: _round2(raw[k]) for k in Pollen.model_fields})


def parse_astronomy(raw: dict) -> Astronomy:
    return Astronomy(
        sunrise=raw["sunrise"],
        sunset=raw["sunset"],
        moonrise=raw["moonrise"],
        moonset=raw["moonset"],
        moon_phase=raw["moon_phase"],
        moon_illumination=raw["moon_illumination"],
        is_moon_up=raw.get("is_moon_up"),
        is_sun_up=raw.get("is_sun_up"),
    )


def parse_marine(raw_hour: dict) -> MarineWeather:
    sig_ht = raw_hour.get("sig_ht_mt")
    swell_ht = raw_hour.get("swell_ht_mt")
    return MarineWeather(
        significant_wave_height=_round2(sig_ht) if sig_ht else None,
        swell_height=_round2(swell_ht) if swell_ht else None,
        swell_direction=raw_hour.get("swell_dir"),
        swell_period=raw_hour.get("swell_period_secs"),
        water_temperature=_round_if(raw_hour.get("water_temp_c")),
    )


def parse_tide(raw: dict) -> Tide:
    return Tide(
        time=raw["tide_time"],
        height=_round2(raw["tide_height_mt"]),
        type=raw["tide_type"],
    )


# 5. WEATHER TOOL

def build_weather_result(
    request: WeatherRequest,
    forecast_data: dict,
    astronomy_data: Optional[dict] = None,
    marine_data: Optional[dict] = None,
) -> WeatherResult:
    raw_current = forecast_data["current"]
    forecast_days = forecast_data["forecast"]["forecastday"]

    current = parse_current(raw_current)
    forecast = [parse_forecast_day(day) for day in forecast_days]

    hourly = None
    if request.include_hourly and forecast_days and forecast_days[0].get("hour"):
        hourly = [parse_hour(h) for h in forecast_days[0]["hour"][:HOURLY_LIMIT]]

    raw_alerts = (forecast_data.get("alerts") or {}).get("alert") or []
    alerts = [parse_alert(a) for a in raw_alerts]

    air_quality = None
    if request.include_air_quality and raw_current.get("air_quality"):
        air_quality = parse_air_quality(raw_current["air_quality"])

    pollen = None
    if request.include_pollen and raw_current.get("pollen"):
        pollen = parse_pollen(raw_current["pollen"])

    astronomy = None
    astro = ((astronomy_data or {}).get("astronomy") or {}).get("astro")
    if request.include_astronomy and astro:
        astronomy = parse_astronomy(astro)

    marine_days = ((marine_data or {}).get("forecast") or {}).get("forecastday") or []

    marine = None
    if request.include_marine and marine_days and marine_days[0].get("hour"):
        marine = parse_marine(marine_days[0]["hour"][0])

    tides = None
    if request.include_tides and marine_days and marine_days[0].get("tides"):
        tides = [parse_tide(t) for t in marine_days[0]["tides"]]

    return WeatherResult(
        location=forecast_data["location"]["name"],
        current=current,
        forecast=forecast,
        hourly=hourly,
        alerts=alerts,
        air_quality=air_quality,
        pollen=pollen,
        astronomy=astronomy,
        marine=marine,
        tides=tides,
        disease_risk=estimate_disease_risk(current, air_quality, request.farming_type),
    )


def fallback_weather(request: WeatherRequest) -> WeatherResult:
    now = datetime.now(timezone.utc)
    current = CurrentWeather(last_updated=now.isoformat(), **FALLBACK_CURRENT)
    forecast = [
        ForecastDay(date=(now + timedelta(days=i)).date().isoformat(), **day)
        for i, day in enumerate(FALLBACK_FORECAST)
    ]
    air_quality = AirQuality(**FALLBACK_AIR_QUALITY) if request.include_air_quality else None

    return WeatherResult(
        location=request.location,
        current=current,
        forecast=forecast,
        hourly=[HourlyWeather(**h) for h in FALLBACK_HOURLY] if request.include_hourly else None,
        alerts=[],
        air_quality=air_quality,
        pollen=Pollen(**FALLBACK_POLLEN) if request.include_pollen else None,
        astronomy=Astronomy(**FALLBACK_ASTRONOMY) if request.include_astronomy else None,
        marine=MarineWeather(**FALLBACK_MARINE) if request.include_marine else None,
        tides=[Tide(**t) for t in FALLBACK_TIDES] if request.include_tides else None,
        disease_risk=estimate_disease_risk(current, air_quality, request.farming_type),
        is_fallback=True,
    )


def fetch_weather(request: WeatherRequest) -> WeatherResult:
    api_key = WEATHER_API_KEY
    if not api_key:
        raise RuntimeError("Weather API key not found")

    location = normalize_location(request.location)
    days = clamp_days(request.days)

    forecast_data = fetch_forecast(location, days, request, api_key)

    astronomy_data = None
    if request.include_astronomy:
        astronomy_data = fetch_astronomy(location, api_key)

    marine_data = None
    if request.include_marine:
        marine_data = fetch_marine(location, days, request.include_tides, api_key)

    return build_weather_result(request, forecast_data, astronomy_data, marine_data)


def get_nigerian_weather(request: WeatherRequest) -> WeatherResult:
    try:
        return fetch_weather(request)
    except (requests.RequestException, RuntimeError, LookupError, TypeError, ValueError, AttributeError) as e:
        logger.error(f"Weather API error for '{request.location}', using fallback: {e}")
        return fallback_weather(request)
