"""
Assets Feature
바이너리 에셋 저장소
"""
