"""
Canvas Feature
캔버스 룸과 작업 결과 반영
"""
