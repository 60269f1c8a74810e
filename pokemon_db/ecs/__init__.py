# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Package to build the ECS Task Definition and Fargate Service running the pokemon-db container
"""
