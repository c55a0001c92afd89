# -*- coding: utf-8 -*-
"""
Solar Production Routes - PVWatts estimate proxy
"""
from flask import Blueprint, jsonify

from enerjios.schemas.solar import SolarProductionIn
from enerjios.services.nrel import NRELService
from enerjios.utils.decorators import login_required
from enerjios.utils.helpers import parse_body

solar_bp = Blueprint('solar', __name__, url_prefix='/api/solar')


@solar_bp.route('/production', methods=['POST'])
@login_required
def calculate_production():
    """
    Estimate yearly production of a PV system
    ---
    tags:
      - Solar
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [latitude, longitude, system_capacity]
          properties:
            latitude:
              type: number
              example: 39.93
            longitude:
              type: number
              example: 32.86
            system_capacity:
              type: number
              description: DC capacity in kW
            tilt:
              type: number
            azimuth:
              type: number
            array_type:
              type: string
              enum: [fixed_open_rack, fixed_roof_mounted, one_axis, one_axis_backtracking, two_axis]
            module_type:
              type: string
              enum: [standard, premium, thin_film]
            losses:
              type: number
    responses:
      200:
        description: Annual and monthly production
      502:
        description: Solar resource service unavailable
    """
    data = parse_body(SolarProductionIn)
    production = NRELService().calculate_production(
        data.latitude,
        data.longitude,
        data.system_capacity,
        tilt=data.tilt,
        azimuth=data.azimuth,
        array_type=data.array_type,
        module_type=data.module_type,
        losses=data.losses,
    )
    return jsonify({'input': data.model_dump(), 'production': production})
